"""
Therapy session models.

JSON uses camelCase field names to match the portal front end; snake_case
names are accepted on input as well.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialising field names in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TherapyStatus(str, Enum):
    """Therapy session status enum."""

    SCHEDULED = "scheduled"  # In the ready queue
    WAITING = "waiting"  # In the waiting queue
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return _TERMINAL[self]


_TERMINAL = {
    TherapyStatus.SCHEDULED: False,
    TherapyStatus.WAITING: False,
    TherapyStatus.COMPLETED: True,
    TherapyStatus.CANCELLED: True,
}


class TherapySession(CamelModel):
    """A therapy appointment in the ready or waiting queue (or finished)."""

    id: str
    session_id: str
    patient_id: str
    practitioner_id: str
    time_slot: datetime
    duration_minutes: int
    priority: int
    status: TherapyStatus = TherapyStatus.SCHEDULED
    reason: Optional[str] = None

    # Admission order, assigned by the store
    sequence: int = 0

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None

    @property
    def end_time(self) -> datetime:
        return self.time_slot + timedelta(minutes=self.duration_minutes)

    def queue_key(self) -> tuple[int, datetime, int]:
        """Sort key shared by the ready and waiting queues."""
        return (self.priority, self.time_slot, self.sequence)


class ScheduleRequest(CamelModel):
    """Request to schedule a new therapy session."""

    patient_id: str
    practitioner_id: str
    time_slot: datetime
    priority: StrictInt
    duration_minutes: Optional[StrictInt] = None

    @field_validator("time_slot")
    @classmethod
    def normalise_time_slot(cls, v: datetime) -> datetime:
        return as_utc(v)


class MoveToWaitingRequest(CamelModel):
    """Request to move a ready session into the waiting queue."""

    reason: Optional[str] = None


class CancelRequest(CamelModel):
    """Request to cancel a session."""

    reason: Optional[str] = None


class RescheduleSummary(CamelModel):
    """Outcome of one rescheduling pass."""

    promoted: int
    still_waiting: int
    sessions: list[TherapySession] = Field(default_factory=list)
