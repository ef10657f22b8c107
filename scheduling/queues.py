"""
Ready and waiting queues.

Both queues are views over ``TherapyStorage``: membership is decided by the
session status alone, so a session can never appear in both.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from api.models.therapy import TherapySession, TherapyStatus, utcnow
from scheduling.exceptions import NotFoundError, ValidationError
from storage import TherapyStorage

logger = logging.getLogger(__name__)


def _ordered(sessions: list[TherapySession]) -> list[TherapySession]:
    return sorted(sessions, key=lambda s: s.queue_key())


class ReadyQueue:
    """Sessions committed to a time slot (status ``scheduled``)."""

    status = TherapyStatus.SCHEDULED

    def __init__(self, storage: TherapyStorage):
        self.storage = storage

    def list(self) -> list[TherapySession]:
        """All ready sessions by priority, then time slot, then admission order."""
        return _ordered(self.storage.list_by_status(self.status))

    def for_practitioner(self, practitioner_id: str) -> list[TherapySession]:
        return _ordered(self.storage.list_for_practitioner(practitioner_id, self.status))


class WaitingQueue:
    """Sessions waiting for a slot (status ``waiting``)."""

    status = TherapyStatus.WAITING

    def __init__(
        self,
        storage: TherapyStorage,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.storage = storage
        self.clock = clock

    def list(self) -> list[TherapySession]:
        """All waiting sessions, in the order the rescheduler processes them."""
        return _ordered(self.storage.list_by_status(self.status))

    def for_practitioner(self, practitioner_id: str) -> list[TherapySession]:
        return _ordered(self.storage.list_for_practitioner(practitioner_id, self.status))

    def add(self, session_id: str, reason: Optional[str]) -> TherapySession:
        """
        Move a ready session into the waiting queue.

        Args:
            session_id: Session id or label
            reason: Why the session left the ready queue (required)

        Returns:
            The updated session
        """
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A reason is required", field="reason")

        session = self.storage.get(session_id)
        if session is None:
            raise NotFoundError(session_id)

        with self.storage.practitioner_lock(session.practitioner_id):
            # Re-read under the lock; another request may have moved it
            current = self.storage.get(session.id)
            if current is None or current.status != TherapyStatus.SCHEDULED:
                raise NotFoundError(
                    session_id, f"No scheduled therapy session {session_id}"
                )

            updated = current.model_copy(
                update={
                    "status": TherapyStatus.WAITING,
                    "reason": reason,
                    "updated_at": self.clock(),
                }
            )
            self.storage.update(updated)

        logger.info(
            "Session %s moved to waiting queue: %s", updated.session_id, reason
        )
        return updated
