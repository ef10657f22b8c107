"""
Batch rescheduling of the waiting queue.

A greedy, priority-ordered pass: for each practitioner, waiting sessions are
taken in queue order (priority, original slot, admission order) and each one
claims the earliest free slot at or after its original time, within the
configured horizon. Sessions without a free slot stay in waiting.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from api.models.therapy import RescheduleSummary, TherapySession, TherapyStatus, utcnow
from config import Settings, get_settings
from scheduling.queues import ReadyQueue, WaitingQueue
from scheduling.slots import ceil_dt_to_minutes, first_free_slot
from storage import TherapyStorage

logger = logging.getLogger(__name__)


class Rescheduler:
    """Promotes waiting sessions back into the ready queue."""

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

    def run(self) -> RescheduleSummary:
        """
        Run one rescheduling pass over the whole waiting queue.

        Returns:
            Summary with the number promoted, the number still waiting and
            the promoted sessions
        """
        practitioners = sorted({s.practitioner_id for s in self.waiting.list()})
        earliest = ceil_dt_to_minutes(self.clock(), self.settings.slot_step_minutes)

        promoted: list[TherapySession] = []
        still_waiting = 0
        for practitioner_id in practitioners:
            moved, remaining = self._run_for_practitioner(practitioner_id, earliest)
            promoted.extend(moved)
            still_waiting += remaining

        logger.info(
            "Reschedule pass: %d promoted, %d still waiting",
            len(promoted),
            still_waiting,
        )
        return RescheduleSummary(
            promoted=len(promoted),
            still_waiting=still_waiting,
            sessions=promoted,
        )

    def _run_for_practitioner(
        self, practitioner_id: str, earliest: datetime
    ) -> tuple[list[TherapySession], int]:
        promoted: list[TherapySession] = []
        remaining = 0

        # Occupancy snapshot stays valid while we hold the practitioner lock
        with self.storage.practitioner_lock(practitioner_id):
            busy = [
                (s.time_slot, s.end_time)
                for s in self.ready.for_practitioner(practitioner_id)
            ]

            for session in self.waiting.for_practitioner(practitioner_id):
                anchor = max(session.time_slot, earliest)
                slot = first_free_slot(
                    anchor,
                    session.duration_minutes,
                    busy,
                    step_minutes=self.settings.slot_step_minutes,
                    horizon_minutes=self.settings.reschedule_horizon_minutes,
                )
                if slot is None:
                    remaining += 1
                    continue

                updated = session.model_copy(
                    update={
                        "status": TherapyStatus.SCHEDULED,
                        "time_slot": slot,
                        "reason": None,
                        "updated_at": self.clock(),
                    }
                )
                self.storage.update(updated)
                busy.append((updated.time_slot, updated.end_time))
                promoted.append(updated)
                logger.info(
                    "Session %s promoted to %s", updated.session_id, slot.isoformat()
                )

        return promoted, remaining
