"""Clock interface for dependency injection."""

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime


class Timer:
    """Timer interface.

    A timer fires its callback at most once per arming. ``cancel`` and ``reset``
    are best effort: once the callback has started they can no longer stop it,
    and they report that through their return value.
    """

    def __init__(self, delay: float, callback: Callable[[], None]):
        """Store timer configuration for later execution."""
        self.delay = delay
        self.callback = callback
        self._cancelled = False
        self._fired = False
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        """Whether the callback has neither fired nor been cancelled."""
        with self._lock:
            return not (self._cancelled or self._fired)

    def cancel(self) -> bool:
        """Cancel the timer. Return whether the callback was still pending."""
        with self._lock:
            was_pending = not (self._cancelled or self._fired)
            self._cancelled = True
        return was_pending

    def reset(self, delay: float) -> bool:
        """Re-arm the timer to fire ``delay`` seconds from now.

        Return whether the callback was still pending before the reset.
        """
        with self._lock:
            was_pending = not (self._cancelled or self._fired)
            self.delay = delay
            self._cancelled = False
            self._fired = False
            self._generation += 1
        self.start()
        return was_pending

    def start(self) -> None:
        """Start the timer."""
        self._fire(self._generation)

    def _fire(self, generation: int) -> None:
        """Run the callback unless cancelled, already fired, or re-armed since."""
        with self._lock:
            if self._cancelled or self._fired or generation != self._generation:
                return
            self._fired = True
        self.callback()


class Clock(ABC):
    """Clock interface for reading time and creating timers."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time."""

    @abstractmethod
    def timer(self, delay: float, callback: Callable[[], None]) -> Timer:
        """Create a timer that will call callback after delay seconds."""


class ThreadingTimer(Timer):
    """Timer implementation using threading.Timer."""

    def __init__(self, delay: float, callback: Callable[[], None]):
        """Wrap a ``threading.Timer`` to defer execution."""
        super().__init__(delay, callback)
        self._timer: threading.Timer | None = None

    def cancel(self) -> bool:
        """Cancel the timer."""
        was_pending = super().cancel()
        if self._timer is not None:
            self._timer.cancel()
        return was_pending

    def reset(self, delay: float) -> bool:
        """Re-arm the timer on a fresh thread."""
        if self._timer is not None:
            self._timer.cancel()
        return super().reset(delay)

    def start(self) -> None:
        """Start the timer."""
        if not self.pending:
            return
        self._timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
        self._timer.daemon = True
        self._timer.start()


class ThreadingClock(Clock):
    """Real clock implementation using threading.Timer."""

    def now(self) -> datetime:
        """Return the current UTC time."""
        return datetime.now(UTC)

    def timer(self, delay: float, callback: Callable[[], None]) -> Timer:
        """Create a timer that will call callback after delay seconds."""
        return ThreadingTimer(delay, callback)
