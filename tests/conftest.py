"""Pytest configuration and fixtures for the test suite."""

from collections.abc import Generator

import pytest

from pomodoro.keeper.time_keeper import TimeKeeper
from tests.test_utils import ManualClock, RecordingStore, SequentialIds


@pytest.fixture
def clock() -> ManualClock:
    """Provide a clock that only moves when told to."""
    return ManualClock()


@pytest.fixture
def store() -> RecordingStore:
    """Provide an instrumented in-memory store."""
    return RecordingStore()


@pytest.fixture
def keeper(clock: ManualClock, store: RecordingStore) -> Generator[TimeKeeper, None, None]:
    """Provide a time keeper on the manual clock."""
    with TimeKeeper(store=store, clock=clock, id_generator=SequentialIds()) as keeper:
        yield keeper
