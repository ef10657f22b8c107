# tests/conftest.py
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.models.therapy import ScheduleRequest
from api.routes.therapy import get_clock
from config import Settings, get_settings
from scheduling import Rescheduler, TherapyScheduler
from storage import TherapyStorage, get_storage
from therapy_client import TherapyServiceClient

START = datetime(2030, 1, 1, 8, 0, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0, day: int = 1) -> datetime:
    return datetime(2030, 1, day, hour, minute, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock so tests control "now"."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest.fixture
def settings():
    return Settings(
        default_duration_minutes=60,
        slot_step_minutes=30,
        reschedule_horizon_minutes=24 * 60,
        conflict_policy="queue",
        api_token=None,
    )


@pytest.fixture
def storage():
    return TherapyStorage()


@pytest.fixture
def scheduler(storage, settings, clock):
    return TherapyScheduler(storage, settings, clock)


@pytest.fixture
def rescheduler(storage, settings, clock):
    return Rescheduler(storage, settings, clock)


@pytest.fixture
def book(scheduler):
    """Schedule a session with sensible defaults."""

    def _book(
        practitioner_id="P1",
        time_slot=None,
        priority=1,
        patient_id="patient-1",
        duration_minutes=None,
    ):
        return scheduler.schedule(
            ScheduleRequest(
                patient_id=patient_id,
                practitioner_id=practitioner_id,
                time_slot=time_slot or at(10),
                priority=priority,
                duration_minutes=duration_minutes,
            )
        )

    return _book


@pytest.fixture
def api_client(storage, settings, clock):
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app, base_url="http://testserver/api") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def therapy_client(api_client):
    return TherapyServiceClient(http_client=api_client, token="test-token")
