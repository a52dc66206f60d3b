"""Notification output adapters."""

from src.notify.notifier import (
    POLL_FAILURE_MINUTES,
    DesktopNotifier,
    FailureChannel,
    LogFailureChannel,
    LogNotifier,
    Notifier,
    build_notifier,
    format_notification,
)

__all__ = [
    "POLL_FAILURE_MINUTES",
    "DesktopNotifier",
    "FailureChannel",
    "LogFailureChannel",
    "LogNotifier",
    "Notifier",
    "build_notifier",
    "format_notification",
]
