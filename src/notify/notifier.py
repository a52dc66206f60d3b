"""Notifier and failure-channel implementations."""

from __future__ import annotations

from typing import Protocol

from loguru import logger
from plyer import notification

POLL_FAILURE_MINUTES = -1


class Notifier(Protocol):
    """Delivers an arrival alert. ``minutes == -1`` means polling failed."""

    def notify(self, route: str, stop: str, minutes: int) -> None:
        ...


class FailureChannel(Protocol):
    """Surfaces a short-lived poll failure message to the user."""

    def report(self, stop: str, route: str, message: str) -> None:
        ...


def format_notification(route: str, stop: str, minutes: int) -> tuple[str, str]:
    """Return the (title, body) pair shown for an alert."""
    if minutes == POLL_FAILURE_MINUTES:
        return "ETA unavailable", f"Route {route}, stop {stop}: polling failed."
    unit = "minute" if minutes == 1 else "minutes"
    return f"Bus in {minutes} {unit}", f"Route {route}, stop {stop}."


class DesktopNotifier:
    """Sends OS notifications through plyer."""

    def __init__(self, app_name: str = "Bus ETA Notifier", timeout_seconds: int = 10) -> None:
        self._app_name = app_name
        self._timeout_seconds = timeout_seconds

    def notify(self, route: str, stop: str, minutes: int) -> None:
        title, body = format_notification(route, stop, minutes)
        logger.info(f"Notification: {title} - {body}")
        try:
            notification.notify(
                title=title,
                message=body,
                app_name=self._app_name,
                timeout=self._timeout_seconds,
            )
        except Exception as exc:
            # Delivery is best effort; the platform backend may be missing.
            logger.warning(f"Desktop notification failed: {exc}")


class LogNotifier:
    """Writes notifications to the log only."""

    def notify(self, route: str, stop: str, minutes: int) -> None:
        title, body = format_notification(route, stop, minutes)
        logger.info(f"Notification: {title} - {body}")


class LogFailureChannel:
    """Reports poll failures as warnings."""

    def report(self, stop: str, route: str, message: str) -> None:
        logger.warning(f"Failed to fetch ETA for stop {stop}, route {route}: {message}")


def build_notifier(backend: str, app_name: str) -> Notifier:
    """Create the notifier named by the ``notifier.backend`` config key."""
    if backend == "desktop":
        return DesktopNotifier(app_name=app_name)
    if backend == "log":
        return LogNotifier()
    raise ValueError(f"Unknown notifier backend '{backend}'")


__all__ = [
    "POLL_FAILURE_MINUTES",
    "Notifier",
    "FailureChannel",
    "format_notification",
    "DesktopNotifier",
    "LogNotifier",
    "LogFailureChannel",
    "build_notifier",
]
