"""Rounding and day-span helpers shared by the analytics services."""

import math
from datetime import date, datetime, time, timezone

SECONDS_PER_DAY = 60 * 60 * 24


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going towards +infinity (2.5 -> 3, -2.5 -> -2)."""
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def start_of_day(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def ceil_days(start: datetime, end: datetime) -> int:
    """Whole days from start to end, partial days counting as one."""
    return math.ceil((as_utc(end) - as_utc(start)).total_seconds() / SECONDS_PER_DAY)
