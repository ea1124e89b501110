"""Timer records and the thread-safe store that owns them."""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any, Protocol

from ..common.clock import Timer

Action = Callable[[], Any]


class TimerState(StrEnum):
    """Internal lifecycle marker of a record."""

    RUNNING = "running"
    PAUSED = "paused"
    EXPIRING = "expiring"
    CLOSED = "closed"


@dataclass(eq=False)
class TimerRecord:
    """Stored state of one pomodoro.

    Every field except ``identifier`` and ``actions`` is mutated under ``lock``.
    ``handle`` is ``None`` while paused and once the record is closed.
    """

    identifier: str
    start_time: datetime
    remaining: timedelta
    actions: tuple[Action, ...] = ()
    handle: Timer | None = None
    state: TimerState = TimerState.RUNNING
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def live(self) -> bool:
        """Whether pause, resume and stop may still act on the record."""
        return self.state in (TimerState.RUNNING, TimerState.PAUSED)


class TimerStore(Protocol):
    """Protocol for concurrent timer record storage."""

    def put(self, identifier: str, record: TimerRecord) -> None:
        """Insert or overwrite the record stored under ``identifier``."""
        ...

    def get(self, identifier: str) -> TimerRecord | None:
        """Return the record for ``identifier`` or ``None``."""
        ...

    def delete(self, identifier: str, expected: TimerRecord | None = None) -> bool:
        """Remove the record; with ``expected``, only if it is still the stored one."""
        ...

    def records(self) -> list[TimerRecord]:
        """Return a snapshot of all stored records."""
        ...

    def __contains__(self, identifier: str) -> bool:
        """Return whether a record is stored under ``identifier``."""
        ...

    def __len__(self) -> int:
        """Return how many records are stored."""
        ...


class InMemoryTimerStore:
    """Dictionary-backed timer store guarded by a single lock."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._records: dict[str, TimerRecord] = {}
        self._lock = threading.Lock()

    def put(self, identifier: str, record: TimerRecord) -> None:
        """Insert or overwrite a record."""
        with self._lock:
            self._records[identifier] = record

    def get(self, identifier: str) -> TimerRecord | None:
        """Get a record."""
        with self._lock:
            return self._records.get(identifier)

    def delete(self, identifier: str, expected: TimerRecord | None = None) -> bool:
        """Delete a record, doing nothing if it is absent or was replaced."""
        with self._lock:
            current = self._records.get(identifier)
            if current is None or (expected is not None and current is not expected):
                return False
            del self._records[identifier]
            return True

    def records(self) -> list[TimerRecord]:
        """All records."""
        with self._lock:
            return list(self._records.values())

    def __contains__(self, identifier: str) -> bool:
        """Membership."""
        with self._lock:
            return identifier in self._records

    def __len__(self) -> int:
        """Size."""
        with self._lock:
            return len(self._records)
