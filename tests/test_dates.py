from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from issuedue.dates import (
    days_until,
    hours_until,
    minutes_until,
    same_calendar_day,
    time_until,
)

DUE = datetime(2024, 1, 10, tzinfo=timezone.utc)


def test_time_until_is_signed_milliseconds():
    assert time_until(DUE, DUE - timedelta(seconds=1)) == 1000
    assert time_until(DUE, DUE + timedelta(milliseconds=250)) == -250


def test_last_instant_before_due_rounds_to_zero():
    ref = DUE - timedelta(milliseconds=1)
    assert minutes_until(DUE, ref) == 0
    assert hours_until(DUE, ref) == 0
    assert days_until(DUE, ref) == 0


def test_one_minute_past_due_is_negative_in_every_unit():
    ref = DUE + timedelta(minutes=1)
    assert minutes_until(DUE, ref) == -1
    assert hours_until(DUE, ref) == -1
    assert days_until(DUE, ref) == -1


def test_partial_units_floor_from_minutes():
    ref = DUE - timedelta(days=2, hours=5, minutes=7, seconds=30)
    assert minutes_until(DUE, ref) == 2 * 1440 + 5 * 60 + 7
    assert hours_until(DUE, ref) == 53
    assert days_until(DUE, ref) == 2


def test_reference_defaults_to_now():
    future = datetime.now(timezone.utc) + timedelta(days=10, minutes=5)
    assert days_until(future) == 10


@pytest.mark.parametrize("fn", [minutes_until, hours_until, days_until])
def test_helpers_are_non_increasing_as_reference_advances(fn):
    refs = [DUE + timedelta(minutes=m) for m in range(-3000, 3000, 37)]
    values = [fn(DUE, ref) for ref in refs]
    assert all(a >= b for a, b in zip(values, values[1:]))


def test_same_calendar_day_depends_on_zone():
    a = datetime(2024, 1, 9, 21, 50, tzinfo=timezone.utc)
    b = datetime(2024, 1, 9, 22, 10, tzinfo=timezone.utc)
    assert same_calendar_day(a, b, timezone.utc)
    plus_two = timezone(timedelta(hours=2))
    assert not same_calendar_day(a, b, plus_two)
