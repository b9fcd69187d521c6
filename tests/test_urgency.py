from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from issuedue.models import DueIssue, DueSpec, IssueRecord, Offset, UrgencyBucket
from issuedue.urgency import (
    BucketLabels,
    classify,
    compose_comment,
    evaluate,
    first_due_reminder,
    plan_labels,
    reminder_due,
)

UTC = timezone.utc
NOW = datetime(2024, 1, 9, 10, 0, tzinfo=UTC)
ALL = BucketLabels().all()


@pytest.mark.parametrize(
    ("days", "bucket"),
    [
        (-5, UrgencyBucket.OVERDUE),
        (-1, UrgencyBucket.OVERDUE),
        (0, UrgencyBucket.DUE_TODAY),
        (1, UrgencyBucket.DUE_SOON),
        (3, UrgencyBucket.DUE_SOON),
        (4, UrgencyBucket.DUE_LATER),
        (40, UrgencyBucket.DUE_LATER),
    ],
)
def test_classify_boundaries(days, bucket):
    assert classify(days) is bucket


def test_bucket_labels_map_every_bucket():
    labels = BucketLabels(overdue="late")
    assert labels.label_for(UrgencyBucket.OVERDUE) == "late"
    assert labels.label_for(UrgencyBucket.DUE_LATER) == "due-later"
    assert labels.all() == ("late", "due-today", "due-soon", "due-later")


def test_plan_labels_replaces_stale_bucket_label():
    assert plan_labels(["bug", "due-later"], ALL, ["due-soon"]) == ["bug", "due-soon"]


def test_plan_labels_is_none_when_already_applied():
    assert plan_labels(["due-soon", "bug"], ALL, ["due-soon"]) is None
    assert plan_labels([], [], []) is None


def test_plan_labels_removes_multiple_stale_labels():
    assert plan_labels(["overdue", "due-today", "x"], ALL, ["due-today"]) == ["x", "due-today"]


def test_reminder_window_is_inclusive():
    assert reminder_due(NOW, NOW, 0)
    assert reminder_due(NOW + timedelta(minutes=30), NOW, 30)
    assert not reminder_due(NOW + timedelta(minutes=31), NOW, 30)
    assert not reminder_due(NOW - timedelta(minutes=1), NOW, 30)


def test_reminder_must_be_on_the_same_calendar_day():
    now = datetime(2024, 1, 9, 23, 50, tzinfo=UTC)
    next_day = datetime(2024, 1, 10, 0, 10, tzinfo=UTC)
    assert not reminder_due(next_day, now, 30)


def test_calendar_day_uses_reference_zone():
    now = datetime(2024, 1, 9, 21, 50, tzinfo=UTC)
    reminder = datetime(2024, 1, 9, 22, 10, tzinfo=UTC)
    assert reminder_due(reminder, now, 30)
    assert not reminder_due(reminder, now, 30, timezone(timedelta(hours=2)))


def test_reminder_beyond_the_last_representable_day_is_not_due(log_stream):
    reminder = datetime(9999, 12, 31, 23, 20, tzinfo=timezone(timedelta(hours=-5)))
    now = datetime(9999, 12, 31, 23, 0, tzinfo=UTC)
    assert not reminder_due(reminder, now, 30)
    assert "skipping reminder" in log_stream.getvalue()


def test_first_due_reminder_prefers_parse_order():
    early = NOW + timedelta(minutes=5)
    later = NOW + timedelta(minutes=10)
    assert first_due_reminder([later, early], NOW, 30) == later
    assert first_due_reminder([NOW - timedelta(hours=1)], NOW, 30) is None


def test_compose_comment_mentions_assignees():
    due = datetime(2024, 1, 11, 11, 30, tzinfo=UTC)
    text = compose_comment(["alice", "bob"], due, NOW)
    assert text == "@alice, @bob\nThis issue is due in 2 days, 1 hours, 30 minutes."


def test_compose_comment_without_assignees():
    assert compose_comment([], NOW + timedelta(minutes=5), NOW) == (
        "This issue is due in 0 days, 0 hours, 5 minutes."
    )


def test_evaluate_builds_full_decision():
    due = datetime(2024, 1, 10, tzinfo=UTC)
    issue = IssueRecord(number=12, title="t", body="", assignees=("carol",))
    spec = DueSpec(due=due, offsets=(Offset(14, "h"), Offset(1, "d")))
    decision = evaluate(
        DueIssue(issue=issue, spec=spec), NOW, window_minutes=30, labels=BucketLabels()
    )
    assert decision.number == 12
    assert decision.days_until_due == 0
    assert decision.bucket is UrgencyBucket.DUE_TODAY
    assert decision.label == "due-today"
    assert decision.reminders == (due - timedelta(hours=14), due - timedelta(days=1))
    assert decision.fired_reminder == due - timedelta(hours=14)
    assert decision.comment == "@carol\nThis issue is due in 0 days, 14 hours, 0 minutes."
    assert decision.labels_to_remove == ALL


def test_evaluate_without_eligible_reminder_has_no_comment():
    due = datetime(2024, 1, 20, tzinfo=UTC)
    issue = IssueRecord(number=1, title="t", body="")
    decision = evaluate(
        DueIssue(issue=issue, spec=DueSpec(due=due, offsets=(Offset(1, "d"),))),
        NOW,
        window_minutes=30,
        labels=BucketLabels(),
    )
    assert decision.bucket is UrgencyBucket.DUE_LATER
    assert decision.fired_reminder is None
    assert decision.comment is None
