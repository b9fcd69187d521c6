"""Urgency bucketing, label planning and reminder-comment decisions.

Everything here is pure: callers pass the captured ``now`` for the issue
being evaluated and act on the returned :class:`Decision`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo

from .dates import days_until, hours_until, minutes_until, same_calendar_day
from .logging import get_logger
from .models import DueIssue, UrgencyBucket
from .reminders import resolve_reminders

DUE_SOON_DAYS = 3


@dataclass(frozen=True)
class BucketLabels:
    overdue: str = "overdue"
    due_today: str = "due-today"
    due_soon: str = "due-soon"
    due_later: str = "due-later"

    def label_for(self, bucket: UrgencyBucket) -> str:
        return {
            UrgencyBucket.OVERDUE: self.overdue,
            UrgencyBucket.DUE_TODAY: self.due_today,
            UrgencyBucket.DUE_SOON: self.due_soon,
            UrgencyBucket.DUE_LATER: self.due_later,
        }[bucket]

    def all(self) -> tuple[str, ...]:
        return (self.overdue, self.due_today, self.due_soon, self.due_later)


def classify(days_until_due: int) -> UrgencyBucket:
    if days_until_due < 0:
        return UrgencyBucket.OVERDUE
    if days_until_due == 0:
        return UrgencyBucket.DUE_TODAY
    if days_until_due <= DUE_SOON_DAYS:
        return UrgencyBucket.DUE_SOON
    return UrgencyBucket.DUE_LATER


def plan_labels(
    current: Iterable[str],
    labels_to_remove: Iterable[str],
    labels_to_add: Iterable[str],
) -> list[str] | None:
    """Return the label list to set, or ``None`` when nothing would change.

    Labels in ``labels_to_remove`` are dropped first, then every label in
    ``labels_to_add`` is ensured present, keeping the existing order.
    """
    current_list = list(current)
    remove = set(labels_to_remove)
    result = [label for label in current_list if label not in remove]
    for label in labels_to_add:
        if label not in result:
            result.append(label)
    if set(result) == set(current_list):
        return None
    return result


def reminder_due(
    reminder: datetime,
    now: datetime,
    window_minutes: int,
    tz: tzinfo = timezone.utc,
) -> bool:
    try:
        same_day = same_calendar_day(now, reminder, tz)
    except OverflowError as exc:
        get_logger().warning(
            f"skipping reminder {reminder.isoformat()}: {exc}",
            operation="reminder_due",
        )
        return False
    if not same_day:
        return False
    left = minutes_until(reminder, now)
    return 0 <= left <= window_minutes


def first_due_reminder(
    reminders: Sequence[datetime],
    now: datetime,
    window_minutes: int,
    tz: tzinfo = timezone.utc,
) -> datetime | None:
    for reminder in reminders:
        if reminder_due(reminder, now, window_minutes, tz):
            return reminder
    return None


def compose_comment(assignees: Sequence[str], due: datetime, now: datetime) -> str:
    days = days_until(due, now)
    hours = hours_until(due, now) % 24
    minutes = minutes_until(due, now) % 60
    line = f"This issue is due in {days} days, {hours} hours, {minutes} minutes."
    mentions = ", ".join(f"@{login}" for login in assignees)
    return f"{mentions}\n{line}" if mentions else line


@dataclass(frozen=True)
class Decision:
    number: int
    due: datetime
    days_until_due: int
    bucket: UrgencyBucket
    label: str
    reminders: tuple[datetime, ...] = ()
    fired_reminder: datetime | None = None
    comment: str | None = None
    labels_to_remove: tuple[str, ...] = ()


def evaluate(
    due_issue: DueIssue,
    now: datetime,
    *,
    window_minutes: int,
    labels: BucketLabels,
    tz: tzinfo = timezone.utc,
) -> Decision:
    """Decide bucket, label and optional reminder comment for one issue."""
    due = due_issue.spec.due
    days_left = days_until(due, now)
    bucket = classify(days_left)
    reminders = tuple(resolve_reminders(due_issue.spec))
    fired = first_due_reminder(reminders, now, window_minutes, tz)
    comment = (
        compose_comment(due_issue.issue.assignees, due, now) if fired is not None else None
    )
    return Decision(
        number=due_issue.issue.number,
        due=due,
        days_until_due=days_left,
        bucket=bucket,
        label=labels.label_for(bucket),
        reminders=reminders,
        fired_reminder=fired,
        comment=comment,
        labels_to_remove=labels.all(),
    )


__all__ = [
    "DUE_SOON_DAYS",
    "BucketLabels",
    "Decision",
    "classify",
    "plan_labels",
    "reminder_due",
    "first_due_reminder",
    "compose_comment",
    "evaluate",
]
