"""
Therapy scheduler.

Admits new therapy requests into the ready queue, or into the waiting queue
when the practitioner is already booked, and owns the remaining lifecycle
transitions of a session.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from api.models.therapy import (
    ScheduleRequest,
    TherapySession,
    TherapyStatus,
    as_utc,
    utcnow,
)
from config import Settings, get_settings
from scheduling.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from scheduling.queues import ReadyQueue, WaitingQueue
from scheduling.slots import overlaps
from storage import TherapyStorage

logger = logging.getLogger(__name__)

PRIORITIES = (1, 2, 3)
MAX_DURATION_MINUTES = 8 * 60
SLOT_CONFLICT_REASON = "Slot conflict"


def new_session_label() -> str:
    return f"TS-{uuid.uuid4().hex[:8].upper()}"


class TherapyScheduler:
    """Schedules therapy sessions and applies status transitions."""

    def __init__(
        self,
        storage: TherapyStorage,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.storage = storage
        self.settings = settings or get_settings()
        self.clock = clock
        self.ready = ReadyQueue(storage)
        self.waiting = WaitingQueue(storage, clock)

    # Admission

    def schedule(self, request: ScheduleRequest) -> TherapySession:
        """
        Admit a therapy request.

        The session is created as ``scheduled`` when the practitioner is free
        for the requested interval. Otherwise it is queued as ``waiting`` with
        reason "Slot conflict", or rejected with ``ConflictError`` when the
        conflict policy is ``reject``.

        Returns:
            The persisted session
        """
        now = self.clock()
        duration = self._validate(request, now)
        time_slot = as_utc(request.time_slot)
        practitioner_id = request.practitioner_id.strip()

        with self.storage.practitioner_lock(practitioner_id):
            conflicts = self.find_conflicts(practitioner_id, time_slot, duration)

            if conflicts and self.settings.conflict_policy == "reject":
                logger.warning(
                    "Rejected request for practitioner %s at %s: %d conflict(s)",
                    practitioner_id,
                    time_slot.isoformat(),
                    len(conflicts),
                )
                raise ConflictError(conflicts)

            session = TherapySession(
                id=str(uuid.uuid4()),
                session_id=self._unique_label(),
                patient_id=request.patient_id.strip(),
                practitioner_id=practitioner_id,
                time_slot=time_slot,
                duration_minutes=duration,
                priority=request.priority,
                status=TherapyStatus.WAITING if conflicts else TherapyStatus.SCHEDULED,
                reason=SLOT_CONFLICT_REASON if conflicts else None,
                created_at=now,
                updated_at=now,
            )
            self.storage.create(session)

        if conflicts:
            logger.info(
                "Session %s queued as waiting (slot conflict with %s)",
                session.session_id,
                ", ".join(c.session_id for c in conflicts),
            )
        else:
            logger.info(
                "Session %s scheduled for practitioner %s at %s",
                session.session_id,
                practitioner_id,
                time_slot.isoformat(),
            )
        return session

    def find_conflicts(
        self, practitioner_id: str, start: datetime, duration_minutes: int
    ) -> list[TherapySession]:
        """Scheduled sessions of the practitioner overlapping the interval."""
        end = start + timedelta(minutes=duration_minutes)
        return [
            s
            for s in self.ready.for_practitioner(practitioner_id)
            if overlaps(start, end, s.time_slot, s.end_time)
        ]

    def _validate(self, request: ScheduleRequest, now: datetime) -> int:
        if not request.patient_id.strip():
            raise ValidationError("patientId is required", field="patientId")
        if not request.practitioner_id.strip():
            raise ValidationError("practitionerId is required", field="practitionerId")
        if request.priority not in PRIORITIES:
            raise ValidationError("priority must be 1, 2 or 3", field="priority")
        if as_utc(request.time_slot) <= now:
            raise ValidationError("timeSlot must be in the future", field="timeSlot")
        if as_utc(request.time_slot) > now + timedelta(days=self.settings.max_advance_days):
            raise ValidationError(
                f"timeSlot must be within {self.settings.max_advance_days} days",
                field="timeSlot",
            )

        duration = request.duration_minutes
        if duration is None:
            duration = self.settings.default_duration_minutes
        if not 0 < duration <= MAX_DURATION_MINUTES:
            raise ValidationError(
                f"durationMinutes must be between 1 and {MAX_DURATION_MINUTES}",
                field="durationMinutes",
            )
        return duration

    def _unique_label(self) -> str:
        label = new_session_label()
        while self.storage.label_exists(label):
            label = new_session_label()
        return label

    # Transitions

    def get(self, session_id: str) -> TherapySession:
        session = self.storage.get(session_id)
        if session is None:
            raise NotFoundError(session_id)
        return session

    def move_to_waiting(self, session_id: str, reason: Optional[str]) -> TherapySession:
        """Move a scheduled session into the waiting queue, keeping its slot."""
        session = self.get(session_id)
        if not (reason or "").strip():
            raise ValidationError("A reason is required", field="reason")
        with self.storage.practitioner_lock(session.practitioner_id):
            session = self.get(session.id)
            if session.status != TherapyStatus.SCHEDULED:
                raise InvalidStateError(session_id, session.status, "move to waiting")
            return self.waiting.add(session.id, reason)

    def complete(self, session_id: str) -> TherapySession:
        """Mark a scheduled session as completed."""
        session = self.get(session_id)
        with self.storage.practitioner_lock(session.practitioner_id):
            session = self.get(session.id)
            if session.status != TherapyStatus.SCHEDULED:
                raise InvalidStateError(session_id, session.status, "complete")
            now = self.clock()
            updated = session.model_copy(
                update={
                    "status": TherapyStatus.COMPLETED,
                    "completed_at": now,
                    "updated_at": now,
                }
            )
            self.storage.update(updated)

        logger.info("Session %s completed", updated.session_id)
        return updated

    def cancel(self, session_id: str, reason: Optional[str] = None) -> TherapySession:
        """Cancel a scheduled or waiting session."""
        session = self.get(session_id)
        with self.storage.practitioner_lock(session.practitioner_id):
            session = self.get(session.id)
            if session.status.is_terminal:
                raise InvalidStateError(session_id, session.status, "cancel")
            now = self.clock()
            updated = session.model_copy(
                update={
                    "status": TherapyStatus.CANCELLED,
                    "reason": None,
                    "cancelled_at": now,
                    "cancellation_reason": (reason or "").strip() or None,
                    "updated_at": now,
                }
            )
            self.storage.update(updated)

        logger.info("Session %s cancelled", updated.session_id)
        return updated

    # Patient views

    def upcoming(self, patient_id: str, days: int = 7) -> list[TherapySession]:
        """Scheduled sessions of a patient starting within the next ``days`` days."""
        now = self.clock()
        until = now + timedelta(days=days)
        sessions = [
            s
            for s in self.storage.list_for_patient(patient_id)
            if s.status == TherapyStatus.SCHEDULED and now <= s.time_slot <= until
        ]
        return sorted(sessions, key=lambda s: (s.time_slot, s.sequence))

    def history(self, patient_id: str, limit: int = 10) -> list[TherapySession]:
        """Completed and cancelled sessions of a patient, most recent first."""
        sessions = [
            s for s in self.storage.list_for_patient(patient_id) if s.status.is_terminal
        ]
        sessions.sort(key=lambda s: (s.time_slot, s.sequence), reverse=True)
        return sessions[:limit]
