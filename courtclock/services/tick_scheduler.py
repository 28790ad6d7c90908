"""
Tick scheduling for the Courtside Match Clock application.

``TickScheduler`` owns the one timer handle of a session. Every re-arm
cancels the pending handle before scheduling a new one, and each scheduled
callback carries the generation it was created in, so a callback that was
superseded after its timer already fired is dropped instead of ticking twice.
"""
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from ..utils.constants import TICK_INTERVAL_MS

logger = logging.getLogger(__name__)


class TimerBackend(ABC):
    """One-shot timer facility the scheduler is built on."""

    @abstractmethod
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> Any:
        """Run ``callback`` once after ``delay_ms`` and return a handle."""
        pass

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        """Cancel a handle returned by ``schedule``; unknown handles are ignored."""
        pass


class TkAfterBackend(TimerBackend):
    """Timers on a Tk event loop via ``after``/``after_cancel``."""

    def __init__(self, widget):
        self.widget = widget

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> Any:
        return self.widget.after(delay_ms, callback)

    def cancel(self, handle: Any) -> None:
        self.widget.after_cancel(handle)


class ThreadingTimerBackend(TimerBackend):
    """
    Timers on daemon ``threading.Timer`` threads.

    Callbacks run while holding ``lock`` so they are serialised with every
    other operation that takes the same lock (e.g. web requests).
    """

    def __init__(self, lock: threading.RLock):
        self.lock = lock

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> Any:
        timer = threading.Timer(delay_ms / 1000.0, self._run, args=(callback,))
        timer.daemon = True
        timer.start()
        return timer

    def cancel(self, handle: Any) -> None:
        handle.cancel()

    def _run(self, callback: Callable[[], None]) -> None:
        with self.lock:
            callback()


class TickScheduler:
    """Cancel-then-schedule discipline over a single owned timer handle."""

    def __init__(self, backend: TimerBackend, interval_ms: int = TICK_INTERVAL_MS):
        self.backend = backend
        self.interval_ms = interval_ms
        self._handle: Optional[Any] = None
        self._generation = 0

    def cancel(self) -> None:
        """Drop the pending tick, if any; no stale callback will run afterwards."""
        self._generation += 1
        if self._handle is not None:
            handle, self._handle = self._handle, None
            self.backend.cancel(handle)

    def rearm(self, should_run: bool, callback: Callable[[], None]) -> None:
        """
        Replace the pending tick.

        Args:
            should_run: Whether a tick is needed at all
            callback: Function to run when the new tick fires
        """
        self.cancel()
        if not should_run:
            return

        generation = self._generation

        def fire() -> None:
            if generation != self._generation:
                logger.debug("Dropping superseded tick")
                return
            self._handle = None
            callback()

        self._handle = self.backend.schedule(self.interval_ms, fire)
