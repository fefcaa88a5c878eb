"""Cancellable periodic tick sources for the focus controller."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol


class ScheduledHandle(Protocol):
    @property
    def active(self) -> bool:
        ...

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Capability that invokes ``callback`` every ``period_ms`` until cancelled."""
    def schedule(self, callback: Callable[[], None], period_ms: int) -> ScheduledHandle:
        ...


class _ThreadedTick:
    """Handle for one periodic schedule backed by a daemon thread."""

    def __init__(
        self,
        callback: Callable[[], None],
        period_seconds: float,
        logger: logging.Logger,
        name: str,
    ):
        self._callback = callback
        self._period_seconds = period_seconds
        self._logger = logger
        self._cancelled = threading.Event()
        # Held while the callback runs so cancel() can wait it out.
        self._fire_lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, daemon=True, name=name)

    @property
    def active(self) -> bool:
        return not self._cancelled.is_set() and self._thread.is_alive()

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()
        if threading.current_thread() is self._thread:
            # Cancelled from inside the callback; the loop exits after it returns.
            return
        with self._fire_lock:
            pass

    def _run(self) -> None:
        while not self._cancelled.wait(self._period_seconds):
            with self._fire_lock:
                if self._cancelled.is_set():
                    return
                try:
                    self._callback()
                except Exception as error:
                    self._logger.error("Tick callback failed: %s", error, exc_info=True)


class ThreadingScheduler:
    """Scheduler that runs each periodic callback on its own daemon thread."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("focus.scheduler")
        self._counter = 0
        self._lock = threading.Lock()

    def schedule(self, callback: Callable[[], None], period_ms: int) -> _ThreadedTick:
        if period_ms <= 0:
            raise ValueError("period_ms must be greater than zero")
        with self._lock:
            self._counter += 1
            name = f"focus-tick-{self._counter}"
        handle = _ThreadedTick(callback, period_ms / 1000.0, self._logger, name)
        handle.start()
        self._logger.debug("Scheduled %s every %dms", name, period_ms)
        return handle
