"""Pomodoro lifecycle management.

The time keeper owns every live pomodoro in the process. Callers start,
pause, resume and stop timers by identifier; when a running timer runs out
the keeper runs its completion actions on the clock's callback thread and
forgets the timer.

Each record carries its own lock. Pause, resume, stop, restart and the
expiry callback all take it, so exactly one of them decides what happens to
the record next. Expiry only proceeds when the handle that fired is still
the record's current handle; cancelled or replaced handles are ignored.
Completion actions run without any lock held.
"""

import logging
import math
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, Self

from ..common.clock import Clock, ThreadingClock, Timer
from ..common.errors import (
    DurationParseError,
    InvalidIdentifierError,
    TimerInternalError,
    TimerNotFoundError,
    TimerStateError,
)
from ..common.ids import IdentifierGenerator, UUIDGenerator
from ..common.pydantic import TimerSnapshot, TimerStatus
from .store import InMemoryTimerStore, TimerRecord, TimerState, TimerStore

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 20

_ZERO = timedelta(0)


def parse_duration(duration: float | timedelta) -> timedelta:
    """Turn a number of minutes, or a ``timedelta``, into a positive ``timedelta``."""
    if isinstance(duration, timedelta):
        parsed = duration
    else:
        if isinstance(duration, bool) or not isinstance(duration, int | float):
            raise DurationParseError(f"failed to parse duration: {duration!r} is not a number of minutes")
        if not math.isfinite(duration):
            raise DurationParseError(f"failed to parse duration: {duration!r} is not finite")
        try:
            parsed = timedelta(minutes=duration)
        except OverflowError as e:
            raise DurationParseError(f"failed to parse duration: {duration!r} is out of range") from e
    if parsed <= _ZERO:
        raise DurationParseError(f"failed to parse duration: {duration!r} is not positive")
    return parsed


class TimeKeeper:
    """Tracks named pomodoros and fires completion actions when they run out."""

    def __init__(
        self,
        store: TimerStore | None = None,
        clock: Clock | None = None,
        id_generator: IdentifierGenerator | None = None,
        default_duration: float | timedelta = DEFAULT_DURATION_MINUTES,
    ):
        """Initialize the time keeper."""
        self._store: TimerStore = store if store is not None else InMemoryTimerStore()
        self._clock = clock if clock is not None else ThreadingClock()
        self._ids = id_generator if id_generator is not None else UUIDGenerator()
        self._default_duration = parse_duration(default_duration)

    @property
    def default_duration(self) -> timedelta:
        """Duration used when start is given a zero duration."""
        return self._default_duration

    def __enter__(self) -> Self:
        """Use the keeper as a context manager."""
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        """Cancel every pending timer."""
        self.close()

    def __contains__(self, identifier: str) -> bool:
        """Whether a timer is stored under ``identifier``."""
        return identifier in self._store

    def __len__(self) -> int:
        """Number of stored timers."""
        return len(self._store)

    def start(
        self,
        identifier: str = "",
        start_time: datetime | None = None,
        duration: float | timedelta = 0,
        *actions: Callable[[], Any],
    ) -> str:
        """Begin a new pomodoro and return its identifier.

        Args:
            identifier: Key of the timer. Generated when empty.
            start_time: When the run began. Defaults to the clock's current time.
            duration: Minutes (or a ``timedelta``) until the timer fires. Zero
                means the keeper's default duration.
            *actions: Callables run, in order, when the timer runs out.

        Starting an identifier that already has a live timer cancels that timer
        without running its actions and replaces it.

        Raises:
            DurationParseError: If ``duration`` is not a positive number of minutes.
        """
        if not identifier or not identifier.strip():
            identifier = self._ids.new_id()
            logger.info("Timer identifier not provided, generated %s", identifier)

        if start_time is None:
            start_time = self._clock.now()
            logger.info("Start time not provided, using current time")

        if not duration:
            logger.info("Duration not set, using %s", self._default_duration)
            duration = self._default_duration

        try:
            remaining = parse_duration(duration)
        except DurationParseError as e:
            logger.error("%s", e)
            raise

        previous = self._fetch(identifier)
        if previous is not None:
            logger.info("Replacing existing timer %s", identifier)
            self._retire(previous)

        record = TimerRecord(identifier=identifier, start_time=start_time, remaining=remaining, actions=actions)
        with record.lock:
            self._store.put(identifier, record)
            self._arm(record)
        logger.info("Started timer %s for %s", identifier, remaining)
        return identifier

    def pause(self, identifier: str) -> None:
        """Pause a running timer, freezing its remaining time.

        Raises:
            InvalidIdentifierError: If ``identifier`` is blank.
            TimerNotFoundError: If there is no such timer, or it already ran out.
            TimerStateError: If the timer is already paused.
        """
        record = self._lookup(identifier)
        with record.lock:
            self._ensure_live(record)
            if record.state is TimerState.PAUSED:
                logger.info("Timer %s is already paused", identifier)
                raise TimerStateError(f"timer {identifier} is already paused")

            self._disarm(record)
            remaining = record.remaining - self._elapsed(record.start_time)
            if remaining > _ZERO:
                record.remaining = remaining
                record.state = TimerState.PAUSED
                logger.info("Paused timer %s with %s remaining", identifier, remaining)
                return

            # Ran out: completion keeps running on a callback thread, not the caller's.
            record.state = TimerState.EXPIRING
            finisher = self._clock.timer(0, lambda: self._finish(record))

        logger.info("Timer %s ran out before it could be paused", identifier)
        finisher.start()
        raise TimerNotFoundError(identifier, "timer already ran out")

    def resume(self, identifier: str) -> None:
        """Resume a paused timer for its remaining time.

        Raises:
            InvalidIdentifierError: If ``identifier`` is blank.
            TimerNotFoundError: If there is no such timer.
            TimerStateError: If the timer is not paused.
        """
        record = self._lookup(identifier)
        with record.lock:
            self._ensure_live(record)
            if record.state is not TimerState.PAUSED:
                logger.info("Timer %s is not paused", identifier)
                raise TimerStateError(f"timer {identifier} is not paused")

            record.start_time = self._clock.now()
            self._arm(record)
        logger.info("Resumed timer %s with %s remaining", identifier, record.remaining)

    def stop(self, identifier: str) -> None:
        """Stop a running or paused timer without running its actions.

        Raises:
            InvalidIdentifierError: If ``identifier`` is blank.
            TimerNotFoundError: If there is no such timer, or it already ran out.
        """
        record = self._lookup(identifier)
        with record.lock:
            self._ensure_live(record)
            self._retire(record)
            self._store.delete(identifier, expected=record)
        logger.info("Stopped timer %s", identifier)

    def get(self, identifier: str) -> TimerSnapshot:
        """Return a snapshot of one timer."""
        return self._snapshot(self._lookup(identifier))

    def timers(self) -> list[TimerSnapshot]:
        """Return snapshots of every stored timer."""
        snapshots = []
        for record in self._store.records():
            try:
                snapshots.append(self._snapshot(record))
            except TimerNotFoundError:
                continue
        return sorted(snapshots, key=lambda s: s.identifier)

    def close(self) -> None:
        """Cancel every timer without running actions and empty the store."""
        cancelled = 0
        for record in self._store.records():
            with record.lock:
                if record.live:
                    self._retire(record)
                    self._store.delete(record.identifier, expected=record)
                    cancelled += 1
        if cancelled:
            logger.info("Cancelled %d timers on close", cancelled)

    def _lookup(self, identifier: str) -> TimerRecord:
        """Validate ``identifier`` and fetch its record."""
        if not identifier or not identifier.strip():
            logger.error("No timer identifier provided")
            raise InvalidIdentifierError("no timer identifier provided")

        record = self._fetch(identifier)
        if record is None:
            logger.info("No timer associated with %s", identifier)
            raise TimerNotFoundError(identifier)
        return record

    def _fetch(self, identifier: str) -> TimerRecord | None:
        record = self._store.get(identifier)
        if record is not None and not isinstance(record, TimerRecord):
            logger.error("Error reading timer data for %s", identifier)
            raise TimerInternalError(f"stored value for {identifier} is not a timer record")
        return record

    def _ensure_live(self, record: TimerRecord) -> None:
        """Raise if expiry or stop already claimed the record. Call with the record lock held."""
        if not record.live:
            logger.info("Timer %s is no longer active", record.identifier)
            raise TimerNotFoundError(record.identifier, "timer is no longer active")

    def _elapsed(self, since: datetime) -> timedelta:
        now = self._clock.now()
        if (since.tzinfo is None) != (now.tzinfo is None):
            since, now = since.astimezone(), now.astimezone()
        return max(now - since, _ZERO)

    def _arm(self, record: TimerRecord) -> None:
        """Install a fresh handle for the record's remaining time. Call with the record lock held."""
        handle: Timer | None = None

        def on_elapsed() -> None:
            self._expire(record, handle)

        handle = self._clock.timer(record.remaining.total_seconds(), on_elapsed)
        record.handle = handle
        record.state = TimerState.RUNNING
        handle.start()

    def _disarm(self, record: TimerRecord) -> None:
        """Cancel and drop the record's handle. Call with the record lock held."""
        if record.handle is not None:
            if not record.handle.cancel():
                logger.debug("Timer %s callback was no longer pending", record.identifier)
            record.handle = None

    def _retire(self, record: TimerRecord) -> None:
        """Cancel a record so that neither callers nor its callback act on it again."""
        with record.lock:
            self._disarm(record)
            if record.live:
                record.state = TimerState.CLOSED

    def _expire(self, record: TimerRecord, handle: Timer | None) -> None:
        """Clock callback: claim the record if ``handle`` is still current, then finish it."""
        with record.lock:
            if record.handle is not handle or record.state is not TimerState.RUNNING:
                logger.debug("Ignoring stale callback for timer %s", record.identifier)
                return
            record.handle = None
            record.state = TimerState.EXPIRING
        self._finish(record)

    def _finish(self, record: TimerRecord) -> None:
        """Run completion actions of a claimed record, then remove it."""
        logger.info("Running %d finish actions for timer %s", len(record.actions), record.identifier)
        try:
            for action in record.actions:
                try:
                    action()
                except Exception:
                    logger.exception("Finish action %r for timer %s failed", action, record.identifier)
        finally:
            with record.lock:
                record.state = TimerState.CLOSED
                self._store.delete(record.identifier, expected=record)

    def _snapshot(self, record: TimerRecord) -> TimerSnapshot:
        with record.lock:
            remaining = record.remaining
            if record.state is TimerState.RUNNING:
                remaining = max(remaining - self._elapsed(record.start_time), _ZERO)
            elif record.state is TimerState.EXPIRING:
                remaining = _ZERO
            elif record.state is TimerState.CLOSED:
                raise TimerNotFoundError(record.identifier, "timer is no longer active")
            return TimerSnapshot(
                identifier=record.identifier,
                status=TimerStatus(record.state.value),
                started_at=record.start_time,
                remaining=remaining,
            )
