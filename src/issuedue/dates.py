"""Date-delta helpers used for due-date bucketing and reminder windows.

All helpers work on timezone-aware ``datetime`` values and return signed
integers. Division floors toward negative infinity, so the last instant
before a due date reads as ``0`` and any instant past it reads negative.

``reference`` defaults to the current time *at call time*; callers that
evaluate several boundaries for one issue should capture ``now`` once and
pass it explicitly.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS
WEEK_MS = 7 * DAY_MS

_ONE_MS = timedelta(milliseconds=1)
_MINUTES_PER_HOUR = 60
_MINUTES_PER_DAY = 24 * 60


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def time_until(target: datetime, reference: datetime | None = None) -> int:
    """Return ``target - reference`` in milliseconds."""
    ref = reference if reference is not None else utc_now()
    return (target - ref) // _ONE_MS


def minutes_until(target: datetime, reference: datetime | None = None) -> int:
    return time_until(target, reference) // MINUTE_MS


def hours_until(target: datetime, reference: datetime | None = None) -> int:
    # single floor of the minute count; -1 minute is -1 hour, not 0
    return minutes_until(target, reference) // _MINUTES_PER_HOUR


def days_until(target: datetime, reference: datetime | None = None) -> int:
    return minutes_until(target, reference) // _MINUTES_PER_DAY


def same_calendar_day(a: datetime, b: datetime, tz: tzinfo) -> bool:
    """True when both instants fall on the same year/month/day in ``tz``."""
    return a.astimezone(tz).date() == b.astimezone(tz).date()


__all__ = [
    "MINUTE_MS",
    "HOUR_MS",
    "DAY_MS",
    "WEEK_MS",
    "utc_now",
    "time_until",
    "minutes_until",
    "hours_until",
    "days_until",
    "same_calendar_day",
]
