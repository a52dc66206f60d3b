"""Wiring for the notifier: builds the ETA client, notifier and supervisor."""

from __future__ import annotations

from dataclasses import dataclass

from src.config import AppConfig
from src.data.eta_client import CtaBusTrackerClient, EtaSource
from src.data.registry import JsonFileRegistry, MonitorConfig
from src.logic.monitor import ArrivalMonitor, MonitorSnapshot
from src.logic.supervisor import MonitorSupervisor
from src.notify.notifier import FailureChannel, LogFailureChannel, Notifier, build_notifier

DEFAULT_THRESHOLD_MINUTES = 5

COMMAND_HELP = (
    "Commands: status | toggle ID | arrived ID | add STOP ROUTE [MINUTES] | remove ID | quit"
)


@dataclass
class NotifierApp:
    """Everything needed to run monitors for the registered stops."""

    registry: JsonFileRegistry
    supervisor: MonitorSupervisor
    notifier: Notifier


def build_app(
    config: AppConfig,
    source: EtaSource | None = None,
    notifier: Notifier | None = None,
    failures: FailureChannel | None = None,
) -> NotifierApp:
    if source is None:
        source = CtaBusTrackerClient(
            base_url=config.eta.base_url,
            robots_url=config.eta.robots_url,
            user_agent=config.eta.user_agent,
            timeout_seconds=config.eta.timeout_seconds,
            cache_ttl_seconds=config.eta.cache_ttl_seconds,
        )
    if notifier is None:
        notifier = build_notifier(config.notifier.backend, config.notifier.app_name)
    if failures is None:
        failures = LogFailureChannel()

    registry = JsonFileRegistry(config.registry.path)
    registry.load()

    def make_monitor(entry: MonitorConfig, enabled: bool) -> ArrivalMonitor:
        return ArrivalMonitor(
            entry,
            source,
            notifier,
            failures,
            enabled=enabled,
            poll_interval_seconds=config.eta.poll_interval_seconds,
        )

    supervisor = MonitorSupervisor(registry, make_monitor)
    return NotifierApp(registry=registry, supervisor=supervisor, notifier=notifier)


def format_snapshot(snapshot: MonitorSnapshot) -> str:
    config = snapshot.config
    if snapshot.last_eta is None:
        eta = "loading"
    elif snapshot.last_eta == 0:
        eta = "DUE"
    else:
        eta = f"{snapshot.last_eta} min"
    state = "enabled" if snapshot.enabled else "disabled"
    return (
        f"{config.id}  stop {config.stop}  route {config.route}  "
        f"notify before {config.notification_threshold} min  [{state}]  {eta}"
    )


def handle_command(app: NotifierApp, line: str) -> str | None:
    """Apply one interactive command. Returns the reply, or None to quit."""
    parts = line.split()
    if not parts:
        return ""
    command, args = parts[0].lower(), parts[1:]

    if command in {"quit", "exit"}:
        return None
    if command == "status":
        lines = [format_snapshot(snapshot) for snapshot in app.supervisor.snapshots()]
        return "\n".join(lines) if lines else "No monitored stops"
    if command == "help":
        return COMMAND_HELP

    try:
        if command == "toggle" and len(args) == 1:
            enabled = app.supervisor.toggle(args[0])
            return f"{args[0]} {'enabled' if enabled else 'disabled'}"
        if command == "arrived" and len(args) == 1:
            app.supervisor.acknowledge_arrival(args[0])
            return f"{args[0]} disabled"
        if command == "add" and len(args) in {2, 3}:
            threshold = int(args[2]) if len(args) == 3 else DEFAULT_THRESHOLD_MINUTES
            entry = app.registry.add(MonitorConfig.create(args[0], args[1], threshold))
            return f"Added {entry.id}"
        if command == "remove" and len(args) == 1:
            app.registry.remove(args[0])
            return f"Removed {args[0]}"
    except KeyError as exc:
        return f"Unknown monitored stop {exc.args[0]}"
    except ValueError as exc:
        return f"Error: {exc}"

    return COMMAND_HELP


__all__ = [
    "COMMAND_HELP",
    "DEFAULT_THRESHOLD_MINUTES",
    "NotifierApp",
    "build_app",
    "format_snapshot",
    "handle_command",
]
