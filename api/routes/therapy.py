"""
Therapy scheduling routes.

Paths mirror the portal's therapyService calls. Scheduling errors raised
here are turned into JSON responses by the handlers in ``api.main``.
"""

from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends, Query

from api.models.therapy import (
    CancelRequest,
    MoveToWaitingRequest,
    RescheduleSummary,
    ScheduleRequest,
    TherapySession,
    utcnow,
)
from config import Settings, get_settings
from scheduling import Rescheduler, TherapyScheduler
from storage import TherapyStorage, get_storage

router = APIRouter(prefix="/api/therapies", tags=["therapies"])


def get_clock() -> Callable[[], datetime]:
    """Clock used for validation and audit timestamps."""
    return utcnow


def get_scheduler(
    storage: TherapyStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> TherapyScheduler:
    return TherapyScheduler(storage, settings, clock)


def get_rescheduler(
    storage: TherapyStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> Rescheduler:
    return Rescheduler(storage, settings, clock)


@router.post("/schedule", response_model=TherapySession, status_code=201)
def schedule_therapy(
    request: ScheduleRequest,
    scheduler: TherapyScheduler = Depends(get_scheduler),
):
    """
    Schedule a new therapy session.

    The session lands in the ready queue, or in the waiting queue with
    reason "Slot conflict" when the practitioner is already booked.
    """
    return scheduler.schedule(request)


@router.get("/ready", response_model=list[TherapySession])
def get_ready_therapies(scheduler: TherapyScheduler = Depends(get_scheduler)):
    """Ready queue, by priority then time slot."""
    return scheduler.ready.list()


@router.get("/waiting", response_model=list[TherapySession])
def get_waiting_therapies(scheduler: TherapyScheduler = Depends(get_scheduler)):
    """Waiting queue, in rescheduling order."""
    return scheduler.waiting.list()


@router.patch("/cancel/{session_id}", response_model=TherapySession)
def move_to_waiting_queue(
    session_id: str,
    request: MoveToWaitingRequest | None = None,
    scheduler: TherapyScheduler = Depends(get_scheduler),
):
    """Move a ready session to the waiting queue. A reason is required."""
    reason = request.reason if request else None
    return scheduler.move_to_waiting(session_id, reason)


@router.post("/reschedule", response_model=RescheduleSummary)
def reschedule_therapies(rescheduler: Rescheduler = Depends(get_rescheduler)):
    """Try to promote every waiting session into a free slot."""
    return rescheduler.run()


@router.get("/stats/counts")
def get_therapy_counts(storage: TherapyStorage = Depends(get_storage)):
    """Get counts of sessions by status."""
    return storage.count_by_status()


@router.get("/patients/{patient_id}/upcoming", response_model=list[TherapySession])
def get_upcoming_therapies(
    patient_id: str,
    days: int = Query(7, ge=1, le=365),
    scheduler: TherapyScheduler = Depends(get_scheduler),
):
    return scheduler.upcoming(patient_id, days)


@router.get("/patients/{patient_id}/history", response_model=list[TherapySession])
def get_therapy_history(
    patient_id: str,
    limit: int = Query(10, ge=1, le=100),
    scheduler: TherapyScheduler = Depends(get_scheduler),
):
    return scheduler.history(patient_id, limit)


@router.get("/{session_id}", response_model=TherapySession)
def get_therapy(
    session_id: str,
    scheduler: TherapyScheduler = Depends(get_scheduler),
):
    """Get one session by id or label."""
    return scheduler.get(session_id)


@router.post("/{session_id}/complete", response_model=TherapySession)
def complete_therapy(
    session_id: str,
    scheduler: TherapyScheduler = Depends(get_scheduler),
):
    return scheduler.complete(session_id)


@router.post("/{session_id}/cancel", response_model=TherapySession)
def cancel_therapy(
    session_id: str,
    request: CancelRequest | None = None,
    scheduler: TherapyScheduler = Depends(get_scheduler),
):
    """Cancel a ready or waiting session."""
    reason = request.reason if request else None
    return scheduler.cancel(session_id, reason)
