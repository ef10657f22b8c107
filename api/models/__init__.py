"""API models."""

from api.models.therapy import (
    CancelRequest,
    MoveToWaitingRequest,
    RescheduleSummary,
    ScheduleRequest,
    TherapySession,
    TherapyStatus,
)

__all__ = [
    "TherapySession",
    "TherapyStatus",
    "ScheduleRequest",
    "MoveToWaitingRequest",
    "CancelRequest",
    "RescheduleSummary",
]
