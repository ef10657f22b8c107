"""
In-memory therapy session storage.

Sessions are indexed by practitioner and by status so the ready and
waiting queues can be read as views over a single store. Callers that
check-then-write (conflict detection, rescheduling) hold the practitioner
lock from ``practitioner_lock`` for the whole operation.
"""

import itertools
import threading
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator, Optional

from api.models.therapy import TherapySession, TherapyStatus


class TherapyStorage:
    """In-memory store for therapy sessions."""

    def __init__(self):
        self._sessions: dict[str, TherapySession] = {}
        self._by_label: dict[str, str] = {}
        self._by_practitioner: dict[str, set[str]] = {}
        self._by_status: dict[TherapyStatus, set[str]] = {
            status: set() for status in TherapyStatus
        }
        self._sequence = itertools.count(1)
        self._lock = threading.RLock()
        self._practitioner_locks: dict[str, threading.RLock] = {}

    @contextmanager
    def practitioner_lock(self, practitioner_id: str) -> Iterator[None]:
        """Serialize writes for one practitioner's calendar."""
        with self._lock:
            lock = self._practitioner_locks.setdefault(
                practitioner_id, threading.RLock()
            )
        with lock:
            yield

    def create(self, session: TherapySession) -> TherapySession:
        """Store a new session and assign its admission sequence."""
        with self._lock:
            if session.id in self._sessions:
                raise KeyError(f"Session {session.id} already exists")
            if session.session_id in self._by_label:
                raise KeyError(f"Session label {session.session_id} already exists")
            session.sequence = next(self._sequence)
            self._sessions[session.id] = session
            self._by_label[session.session_id] = session.id
            self._by_practitioner.setdefault(session.practitioner_id, set()).add(
                session.id
            )
            self._by_status[session.status].add(session.id)
            return session

    def get(self, session_id: str) -> Optional[TherapySession]:
        """Retrieve a session by id or by its human-facing label."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None and session_id in self._by_label:
                session = self._sessions[self._by_label[session_id]]
            return session

    def label_exists(self, label: str) -> bool:
        with self._lock:
            return label in self._by_label

    def update(self, session: TherapySession) -> TherapySession:
        """Replace an existing session, keeping the status index current."""
        with self._lock:
            current = self._sessions.get(session.id)
            if current is None:
                raise KeyError(f"Session {session.id} not found")
            self._by_status[current.status].discard(session.id)
            self._by_status[session.status].add(session.id)
            self._sessions[session.id] = session
            return session

    def list_by_status(self, status: TherapyStatus) -> list[TherapySession]:
        """List sessions in the given status (unordered)."""
        with self._lock:
            return [self._sessions[sid] for sid in self._by_status[status]]

    def list_for_practitioner(
        self, practitioner_id: str, status: Optional[TherapyStatus] = None
    ) -> list[TherapySession]:
        """List a practitioner's sessions, optionally filtered by status."""
        with self._lock:
            ids = self._by_practitioner.get(practitioner_id, set())
            sessions = [self._sessions[sid] for sid in ids]
        if status is not None:
            sessions = [s for s in sessions if s.status == status]
        return sessions

    def list_for_patient(self, patient_id: str) -> list[TherapySession]:
        """List all sessions of a patient."""
        with self._lock:
            return [s for s in self._sessions.values() if s.patient_id == patient_id]

    def list_all(self) -> list[TherapySession]:
        """List all sessions."""
        with self._lock:
            return list(self._sessions.values())

    def count_by_status(self) -> dict[str, int]:
        """Count sessions by status."""
        with self._lock:
            return {status.value: len(ids) for status, ids in self._by_status.items()}


@lru_cache
def get_storage() -> TherapyStorage:
    """Get the singleton storage instance."""
    return TherapyStorage()
