# tests/test_storage.py
import pytest

from api.models.therapy import TherapySession, TherapyStatus
from storage import TherapyStorage
from tests.conftest import at


def make_session(id_, label, status=TherapyStatus.SCHEDULED, practitioner_id="P1"):
    return TherapySession(
        id=id_,
        session_id=label,
        patient_id="patient-1",
        practitioner_id=practitioner_id,
        time_slot=at(10),
        duration_minutes=60,
        priority=1,
        status=status,
    )


def test_create_assigns_increasing_sequence():
    storage = TherapyStorage()
    first = storage.create(make_session("1", "TS-1"))
    second = storage.create(make_session("2", "TS-2"))

    assert first.sequence < second.sequence


def test_get_by_id_or_label():
    storage = TherapyStorage()
    storage.create(make_session("abc", "TS-ABC"))

    assert storage.get("abc").session_id == "TS-ABC"
    assert storage.get("TS-ABC").id == "abc"
    assert storage.get("nope") is None
    assert storage.label_exists("TS-ABC")


def test_duplicates_rejected():
    storage = TherapyStorage()
    storage.create(make_session("1", "TS-1"))

    with pytest.raises(KeyError):
        storage.create(make_session("1", "TS-other"))
    with pytest.raises(KeyError):
        storage.create(make_session("2", "TS-1"))


def test_update_moves_status_index():
    storage = TherapyStorage()
    session = storage.create(make_session("1", "TS-1"))

    storage.update(session.model_copy(update={"status": TherapyStatus.WAITING}))

    assert storage.list_by_status(TherapyStatus.SCHEDULED) == []
    assert [s.id for s in storage.list_by_status(TherapyStatus.WAITING)] == ["1"]
    assert storage.count_by_status() == {
        "scheduled": 0,
        "waiting": 1,
        "completed": 0,
        "cancelled": 0,
    }


def test_update_unknown_session():
    with pytest.raises(KeyError):
        TherapyStorage().update(make_session("1", "TS-1"))


def test_list_for_practitioner_filters():
    storage = TherapyStorage()
    storage.create(make_session("1", "TS-1", practitioner_id="P1"))
    storage.create(make_session("2", "TS-2", TherapyStatus.WAITING, practitioner_id="P1"))
    storage.create(make_session("3", "TS-3", practitioner_id="P2"))

    assert {s.id for s in storage.list_for_practitioner("P1")} == {"1", "2"}
    assert [s.id for s in storage.list_for_practitioner("P1", TherapyStatus.WAITING)] == ["2"]
    assert storage.list_for_practitioner("P9") == []
