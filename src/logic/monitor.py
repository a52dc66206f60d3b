"""Per stop/route arrival monitor: polls ETAs and decides when to alert."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import threading

from loguru import logger

from src.data.eta_client import EtaSource, PollFailure
from src.data.poller import DEFAULT_POLL_INTERVAL_SECONDS, PollScheduler
from src.data.registry import MonitorConfig
from src.logic.trend import Trend, classify
from src.notify.notifier import POLL_FAILURE_MINUTES, FailureChannel, Notifier


class Lifecycle(Enum):
    ACTIVE = "active"
    STOPPED = "stopped"


@dataclass(frozen=True)
class MonitorSnapshot:
    """Read-only view of a monitor's state."""

    config: MonitorConfig
    enabled: bool
    last_eta: int | None
    lifecycle: Lifecycle


class ArrivalMonitor:
    """State machine for one monitored stop/route pair.

    Every state change (poll result, manual toggle, arrival acknowledgement,
    destroy) happens under ``_lock``. Notifier and failure-channel calls are
    made after the lock is released.
    """

    def __init__(
        self,
        config: MonitorConfig,
        source: EtaSource,
        notifier: Notifier,
        failures: FailureChannel,
        *,
        enabled: bool = True,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._config = config
        self._source = source
        self._notifier = notifier
        self._failures = failures
        self._enabled = enabled
        self._last_eta: int | None = None
        self._lifecycle = Lifecycle.ACTIVE
        self._lock = threading.Lock()
        self._scheduler = PollScheduler(
            self.poll_once,
            interval_seconds=poll_interval_seconds,
            name=f"monitor-{config.id}",
        )

    @property
    def config(self) -> MonitorConfig:
        return self._config

    @property
    def enabled(self) -> bool:
        with self._lock:
            return self._enabled

    @property
    def last_eta(self) -> int | None:
        with self._lock:
            return self._last_eta

    @property
    def is_stopped(self) -> bool:
        with self._lock:
            return self._lifecycle is Lifecycle.STOPPED

    def snapshot(self) -> MonitorSnapshot:
        with self._lock:
            return MonitorSnapshot(self._config, self._enabled, self._last_eta, self._lifecycle)

    def start(self) -> None:
        """Begin polling: one cycle now, then one per interval."""
        with self._lock:
            if self._lifecycle is Lifecycle.STOPPED:
                raise RuntimeError(f"Monitor {self._config.id} has been destroyed")
        self._scheduler.start()

    def poll_once(self) -> Trend | None:
        """Run a single poll cycle and return the trend it observed.

        Returns ``None`` when the poll failed or the monitor is stopped.
        """
        if self.is_stopped:
            return None

        stop, route = self._config.stop, self._config.route
        try:
            eta = self._source.get_eta(stop, route)
        except PollFailure as exc:
            self._handle_failure(str(exc))
            return None
        return self._handle_sample(eta)

    def toggle(self) -> bool:
        """Flip ``enabled`` and return the new value."""
        with self._lock:
            self._enabled = not self._enabled
            enabled = self._enabled
        logger.info(f"Monitor {self._config.id} {'enabled' if enabled else 'disabled'} manually")
        return enabled

    def acknowledge_arrival(self) -> None:
        """User reports the bus arrived: stop alerting regardless of trend."""
        with self._lock:
            self._enabled = False
        logger.info(f"Bus arrived at stop {self._config.stop}, route {self._config.route}")

    def destroy(self) -> None:
        """Stop the monitor; no ETA lookups or alerts happen after this returns."""
        with self._lock:
            already_stopped = self._lifecycle is Lifecycle.STOPPED
            self._lifecycle = Lifecycle.STOPPED
        self._scheduler.cancel()
        if not already_stopped:
            logger.info(f"Monitor {self._config.id} stopped")

    def _handle_sample(self, eta: int) -> Trend | None:
        config = self._config
        notify = False
        with self._lock:
            if self._lifecycle is Lifecycle.STOPPED:
                return None
            previous = self._last_eta
            trend = classify(previous, eta, config.notification_threshold)
            if trend is Trend.ARRIVAL_IMMINENT and self._enabled:
                notify = True
            elif trend is Trend.VEHICLE_PASSED and self._enabled:
                self._enabled = False
                logger.info(
                    f"ETA rose from {previous} to {eta} min at stop {config.stop}, "
                    f"route {config.route}; disabling alerts"
                )
            self._last_eta = eta

        logger.debug(f"Stop {config.stop}, route {config.route}: {previous} -> {eta} min ({trend.value})")
        if notify:
            self._notifier.notify(config.route, config.stop, eta)
        return trend

    def _handle_failure(self, message: str) -> None:
        config = self._config
        with self._lock:
            if self._lifecycle is Lifecycle.STOPPED or not self._enabled:
                logger.debug(f"Ignoring poll failure for stop {config.stop}, route {config.route}: {message}")
                return
            # Failures before the first good sample are not alert-worthy.
            send_sentinel = self._last_eta is not None

        self._failures.report(config.stop, config.route, message)
        if send_sentinel:
            self._notifier.notify(config.route, config.stop, POLL_FAILURE_MINUTES)


__all__ = ["ArrivalMonitor", "Lifecycle", "MonitorSnapshot"]
