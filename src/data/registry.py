"""Persisted list of monitored stop/route pairs."""

from __future__ import annotations

from dataclasses import dataclass
import json
import os
from pathlib import Path
import threading
import time
from typing import Any, Callable

from loguru import logger

ADDED = "added"
REMOVED = "removed"


@dataclass(frozen=True)
class MonitorConfig:
    """A stop/route pair and the number of minutes before arrival to alert."""

    id: str
    stop: str
    route: str
    notification_threshold: int

    @classmethod
    def create(cls, stop: str, route: str, notification_threshold: int) -> "MonitorConfig":
        """Build a new entry with a fresh id; thresholds below 1 are raised to 1."""
        stop = str(stop).strip()
        route = str(route).strip()
        if not stop or not route:
            raise ValueError("stop and route are required")
        entry_id = f"{int(time.time() * 1000)}-{stop}-{route}"
        return cls(
            id=entry_id,
            stop=stop,
            route=route,
            notification_threshold=max(1, int(notification_threshold)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "stop": self.stop,
            "route": self.route,
            "notificationTime": self.notification_threshold,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MonitorConfig":
        try:
            return cls(
                id=str(data["id"]),
                stop=str(data["stop"]),
                route=str(data["route"]),
                notification_threshold=max(1, int(data["notificationTime"])),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid monitored stop entry: {data!r}") from exc


@dataclass(frozen=True)
class RegistryEvent:
    """Membership change delivered to registry listeners."""

    kind: str
    config: MonitorConfig


RegistryListener = Callable[[RegistryEvent], None]


class JsonFileRegistry:
    """Ordered registry of monitor configs stored as a JSON array."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._entries: list[MonitorConfig] = []
        self._listeners: list[RegistryListener] = []
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[MonitorConfig]:
        """Read entries from disk, replacing the in-memory list."""
        if not self._path.exists():
            entries: list[MonitorConfig] = []
        else:
            try:
                data = json.loads(self._path.read_text(encoding="utf-8") or "[]")
            except json.JSONDecodeError as exc:
                raise ValueError(f"Registry file is not valid JSON: {self._path}") from exc
            if not isinstance(data, list):
                raise ValueError("Registry file must contain a list at the top level")
            entries = [MonitorConfig.from_dict(item) for item in data]

        with self._lock:
            self._entries = entries
        logger.debug(f"Loaded {len(entries)} monitored stops from {self._path}")
        return list(entries)

    def entries(self) -> list[MonitorConfig]:
        with self._lock:
            return list(self._entries)

    def get(self, entry_id: str) -> MonitorConfig:
        with self._lock:
            for entry in self._entries:
                if entry.id == entry_id:
                    return entry
        raise KeyError(entry_id)

    def add(self, config: MonitorConfig) -> MonitorConfig:
        with self._lock:
            if any(entry.id == config.id for entry in self._entries):
                raise ValueError(f"Monitored stop '{config.id}' already exists")
            entries = [*self._entries, config]
            self._save_locked(entries)
            self._entries = entries
        logger.info(f"Added monitored stop {config.id} (stop {config.stop}, route {config.route})")
        self._publish(RegistryEvent(ADDED, config))
        return config

    def remove(self, entry_id: str) -> MonitorConfig:
        with self._lock:
            removed = next((entry for entry in self._entries if entry.id == entry_id), None)
            if removed is None:
                raise KeyError(entry_id)
            entries = [entry for entry in self._entries if entry.id != entry_id]
            self._save_locked(entries)
            self._entries = entries
        logger.info(f"Removed monitored stop {entry_id}")
        self._publish(RegistryEvent(REMOVED, removed))
        return removed

    def subscribe(self, listener: RegistryListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: RegistryListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _publish(self, event: RegistryEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event)

    def _save_locked(self, entries: list[MonitorConfig]) -> None:
        # A failed save leaves the previous file and the in-memory list untouched.
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = [entry.to_dict() for entry in entries]
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._path)


__all__ = [
    "ADDED",
    "REMOVED",
    "MonitorConfig",
    "RegistryEvent",
    "RegistryListener",
    "JsonFileRegistry",
]
