# tests/test_slots.py
from datetime import datetime, timedelta, timezone

from scheduling.slots import (
    candidate_slots,
    ceil_dt_to_minutes,
    first_free_slot,
    is_free,
    overlaps,
)
from tests.conftest import at


def test_overlaps_is_half_open():
    assert overlaps(at(10), at(11), at(10, 30), at(11, 30))
    assert not overlaps(at(10), at(11), at(11), at(12))
    assert overlaps(at(10), at(12), at(10, 30), at(11))


def test_ceil_to_grid():
    assert ceil_dt_to_minutes(at(10, 0), 30) == at(10, 0)
    assert ceil_dt_to_minutes(at(10, 1), 30) == at(10, 30)
    assert ceil_dt_to_minutes(at(10, 30).replace(second=5), 30) == at(11, 0)
    assert ceil_dt_to_minutes(at(10, 7), 1) == at(10, 7)


def test_first_free_slot_skips_busy_intervals():
    busy = [(at(10), at(11)), (at(11), at(12))]

    assert first_free_slot(at(10), 60, busy, step_minutes=30, horizon_minutes=240) == at(12)
    assert first_free_slot(at(9), 60, busy, step_minutes=30, horizon_minutes=240) == at(9)


def test_first_free_slot_respects_horizon():
    busy = [(at(10), at(12))]

    assert first_free_slot(at(10), 60, busy, step_minutes=30, horizon_minutes=0) is None
    assert first_free_slot(at(10), 60, busy, step_minutes=30, horizon_minutes=90) is None
    assert first_free_slot(at(10), 60, busy, step_minutes=30, horizon_minutes=120) == at(12)


def test_slot_search_near_end_of_time_does_not_overflow():
    anchor = datetime.max.replace(tzinfo=timezone.utc) - timedelta(minutes=30)

    assert list(candidate_slots(anchor, step_minutes=30, horizon_minutes=24 * 60)) == [anchor]
    assert first_free_slot(anchor, 60, [], step_minutes=30, horizon_minutes=24 * 60) is None
    assert not is_free(anchor, 60, [])
