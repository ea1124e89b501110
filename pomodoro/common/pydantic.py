"""Pydantic base model."""

from datetime import datetime, timedelta
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class FrozenBaseModel(BaseModel):
    """Pydantic frozen base model."""

    model_config = ConfigDict(frozen=True, strict=True)


class TimerStatus(StrEnum):
    """Observable timer status."""

    RUNNING = "running"
    PAUSED = "paused"
    EXPIRING = "expiring"


class TimerSnapshot(FrozenBaseModel):
    """Point-in-time view of a live timer."""

    identifier: str
    status: TimerStatus
    started_at: datetime
    remaining: timedelta
