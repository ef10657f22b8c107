"""Therapy scheduling: queues, scheduler and rescheduler."""

from scheduling.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    SchedulingError,
    ValidationError,
)
from scheduling.queues import ReadyQueue, WaitingQueue
from scheduling.rescheduler import Rescheduler
from scheduling.scheduler import TherapyScheduler

__all__ = [
    "TherapyScheduler",
    "Rescheduler",
    "ReadyQueue",
    "WaitingQueue",
    "SchedulingError",
    "ValidationError",
    "NotFoundError",
    "InvalidStateError",
    "ConflictError",
]
