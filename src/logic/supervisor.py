"""Keeps one running ArrivalMonitor per registry entry."""

from __future__ import annotations

import threading
from typing import Callable

from loguru import logger

from src.data.registry import ADDED, REMOVED, JsonFileRegistry, MonitorConfig, RegistryEvent
from src.logic.monitor import ArrivalMonitor, MonitorSnapshot

MonitorFactory = Callable[[MonitorConfig, bool], ArrivalMonitor]


class MonitorSupervisor:
    """Spawns monitors for registry additions and destroys them on removal.

    Entries already in the registry at ``start`` come up disabled; only entries
    added while running start with alerts enabled.
    """

    def __init__(self, registry: JsonFileRegistry, monitor_factory: MonitorFactory) -> None:
        self._registry = registry
        self._factory = monitor_factory
        self._monitors: dict[str, ArrivalMonitor] = {}
        self._lock = threading.Lock()
        self._started = False

    def start(self) -> None:
        with self._lock:
            if self._started:
                return
            self._started = True
        self._registry.subscribe(self._on_registry_event)
        for config in self._registry.entries():
            with self._lock:
                # Added after subscribe: the listener already spawned it enabled.
                if config.id in self._monitors:
                    continue
            self._spawn(config, enabled=False)
        logger.info(f"Supervisor started with {len(self._monitors)} monitors")

    def shutdown(self) -> None:
        """Destroy every monitor and stop following the registry."""
        self._registry.unsubscribe(self._on_registry_event)
        with self._lock:
            monitors = list(self._monitors.values())
            self._monitors.clear()
            self._started = False
        for monitor in monitors:
            monitor.destroy()
        logger.info("Supervisor shut down")

    def monitor(self, entry_id: str) -> ArrivalMonitor:
        with self._lock:
            return self._monitors[entry_id]

    def snapshots(self) -> list[MonitorSnapshot]:
        with self._lock:
            monitors = list(self._monitors.values())
        return [monitor.snapshot() for monitor in monitors]

    def toggle(self, entry_id: str) -> bool:
        return self.monitor(entry_id).toggle()

    def acknowledge_arrival(self, entry_id: str) -> None:
        self.monitor(entry_id).acknowledge_arrival()

    def _on_registry_event(self, event: RegistryEvent) -> None:
        if event.kind == ADDED:
            self._spawn(event.config, enabled=True)
        elif event.kind == REMOVED:
            self._destroy(event.config.id)

    def _spawn(self, config: MonitorConfig, enabled: bool) -> None:
        monitor = self._factory(config, enabled)
        with self._lock:
            previous = self._monitors.pop(config.id, None)
            self._monitors[config.id] = monitor
        if previous is not None:
            previous.destroy()
        monitor.start()
        logger.info(
            f"Monitoring stop {config.stop}, route {config.route} "
            f"(alert under {config.notification_threshold} min, enabled={enabled})"
        )

    def _destroy(self, entry_id: str) -> None:
        with self._lock:
            monitor = self._monitors.pop(entry_id, None)
        if monitor is not None:
            monitor.destroy()


__all__ = ["MonitorFactory", "MonitorSupervisor"]
