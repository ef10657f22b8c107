"""
Scheduling exceptions.

Raised by the scheduler, queues and rescheduler; the API layer translates
them into JSON error responses (see ``api.main``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from api.models.therapy import TherapySession, TherapyStatus


class SchedulingError(Exception):
    """Base exception for all scheduling-related errors."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(SchedulingError):
    """
    Raised when request data is invalid (bad priority, past time slot,
    missing reason).
    """

    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class NotFoundError(SchedulingError):
    """Raised when a therapy session cannot be found."""

    status_code = 404

    def __init__(self, session_id: str, message: str | None = None):
        self.session_id = session_id
        super().__init__(message or f"Therapy session {session_id} not found")

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "id": self.session_id}


class InvalidStateError(SchedulingError):
    """
    Raised when an operation does not apply to the session's current status,
    e.g. moving a waiting session to waiting again.
    """

    status_code = 409

    def __init__(
        self,
        session_id: str,
        status: TherapyStatus,
        operation: str,
    ):
        self.session_id = session_id
        self.status = status
        self.operation = operation
        super().__init__(
            f"Cannot {operation} therapy session {session_id} "
            f"(status: {status.value})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "id": self.session_id,
            "status": self.status.value,
        }


class ConflictError(SchedulingError):
    """
    Raised when the requested slot overlaps an existing session and the
    conflict policy is ``reject``.

    Contains the conflicting sessions.
    """

    status_code = 409

    def __init__(
        self,
        conflicts: list[TherapySession],
        message: str = "Requested time slot conflicts with a scheduled session",
    ):
        self.conflicts = conflicts
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "conflicts": [
                {
                    "id": c.id,
                    "sessionId": c.session_id,
                    "timeSlot": c.time_slot.isoformat(),
                    "durationMinutes": c.duration_minutes,
                }
                for c in self.conflicts
            ],
        }
