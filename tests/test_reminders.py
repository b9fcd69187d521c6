from __future__ import annotations

from datetime import datetime, timedelta, timezone

from issuedue.models import DueSpec, Offset
from issuedue.reminders import resolve_reminder, resolve_reminders

DUE = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)


def test_resolution_is_linear_in_milliseconds():
    assert resolve_reminder(DUE, Offset(5, "d")) == DUE - timedelta(milliseconds=5 * 86_400_000)
    assert resolve_reminder(DUE, Offset(1, "w")) == DUE - timedelta(milliseconds=604_800_000)
    assert resolve_reminder(DUE, Offset(90, "m")) == DUE - timedelta(minutes=90)
    assert resolve_reminder(DUE, Offset(-2, "h")) == DUE + timedelta(hours=2)


def test_resolve_reminders_keeps_order_and_duplicates():
    spec = DueSpec(due=DUE, offsets=(Offset(1, "d"), Offset(2, "h"), Offset(1, "d")))
    assert resolve_reminders(spec) == [
        DUE - timedelta(days=1),
        DUE - timedelta(hours=2),
        DUE - timedelta(days=1),
    ]


def test_no_offsets_no_reminders():
    assert resolve_reminders(DueSpec(due=DUE)) == []


def test_offset_past_the_datetime_range_is_skipped(log_stream):
    spec = DueSpec(due=DUE, offsets=(Offset(200000, "w"), Offset(1, "h"), Offset(1000000, "d")))
    assert resolve_reminders(spec) == [DUE - timedelta(hours=1)]
    logged = log_stream.getvalue()
    assert "200000w" in logged
    assert "1000000d" in logged
