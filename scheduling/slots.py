"""Time slot arithmetic for conflict checks and slot search."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Iterator, Optional

Interval = tuple[datetime, datetime]


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open interval overlap: touching intervals do not conflict."""
    return start_a < end_b and start_b < end_a


def ceil_dt_to_minutes(dt: datetime, minutes: int) -> datetime:
    if minutes <= 1:
        return dt
    if dt.second or dt.microsecond:
        dt = dt.replace(second=0, microsecond=0) + timedelta(minutes=1)
    mod = (dt.hour * 60 + dt.minute) % minutes
    if mod == 0:
        return dt
    return dt + timedelta(minutes=(minutes - mod))


def add_minutes(dt: datetime, minutes: int) -> Optional[datetime]:
    """``dt + minutes``, or None past the last representable datetime."""
    try:
        return dt + timedelta(minutes=minutes)
    except OverflowError:
        return None


def is_free(start: datetime, duration_minutes: int, busy: Iterable[Interval]) -> bool:
    end = add_minutes(start, duration_minutes)
    if end is None:
        return False
    return not any(overlaps(start, end, b_start, b_end) for b_start, b_end in busy)


def candidate_slots(anchor: datetime, *, step_minutes: int, horizon_minutes: int) -> Iterator[datetime]:
    """Yield anchor, anchor + step, ... up to anchor + horizon inclusive."""
    step = timedelta(minutes=max(step_minutes, 1))
    last = add_minutes(anchor, max(horizon_minutes, 0))
    if last is None:
        last = datetime.max.replace(tzinfo=anchor.tzinfo)
    current = anchor
    while True:
        yield current
        if last - current < step:
            break
        current += step


def first_free_slot(
    anchor: datetime,
    duration_minutes: int,
    busy: list[Interval],
    *,
    step_minutes: int,
    horizon_minutes: int,
) -> Optional[datetime]:
    """Return the earliest candidate slot at or after ``anchor`` not overlapping ``busy``."""
    for start in candidate_slots(anchor, step_minutes=step_minutes, horizon_minutes=horizon_minutes):
        if is_free(start, duration_minutes, busy):
            return start
    return None
