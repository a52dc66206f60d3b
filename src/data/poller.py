"""Threaded fixed-cadence scheduler that drives one monitor's poll cycle."""

from __future__ import annotations

import threading
from typing import Callable

from loguru import logger

DEFAULT_POLL_INTERVAL_SECONDS = 20.0


class PollScheduler:
    """Background thread that runs ``callback`` now and then every interval.

    Ticks run on a single thread, so two cycles never overlap. ``cancel`` waits
    for an in-flight tick, and a tick re-checks cancellation under the tick
    lock before it starts, so nothing runs once ``cancel`` has returned.
    """

    def __init__(
        self,
        callback: Callable[[], object],
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        name: str = "poll-scheduler",
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._callback = callback
        self._interval_seconds = interval_seconds
        self._name = name
        self._stop_event = threading.Event()
        self._tick_lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    @property
    def is_cancelled(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> None:
        """Start the background polling thread."""
        if self._stop_event.is_set():
            raise RuntimeError(f"{self._name} was cancelled and cannot be restarted")
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run_loop, name=self._name, daemon=True)
        self._thread.start()

    def cancel(self, timeout: float | None = None) -> None:
        """Stop ticking and wait for any in-flight tick to finish."""
        self._stop_event.set()
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        # Blocks until the running tick (if any) releases the lock.
        if self._tick_lock.acquire(timeout=-1 if timeout is None else timeout):
            self._tick_lock.release()
        thread.join(timeout=timeout)

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            self._tick()
            self._stop_event.wait(timeout=self._interval_seconds)

    def _tick(self) -> None:
        with self._tick_lock:
            if self._stop_event.is_set():
                return
            try:
                self._callback()
            except Exception:
                logger.exception(f"{self._name}: poll callback raised; continuing")


__all__ = ["DEFAULT_POLL_INTERVAL_SECONDS", "PollScheduler"]
