"""Issue body header parser.

The header is everything before the first literal ``---`` in the issue body.
Recognised lines (case-sensitive keys, whitespace tolerant)::

    due-date: YYYY-MM-DD
    due-time: HH:MM
    time-zone: UTC+HH:MM | UTC-HH:MM
    reminders: 10m 2h 3d 1w

Only ``due-date`` is required. For the date, time and zone fields the first
line whose value is well formed wins; lines with malformed values are passed
over. Without a well-formed date the issue is not considered; a missing or
malformed time or zone is treated as absent. The first ``reminders:`` line
is used, and a malformed token on it is skipped with a warning.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import TypeVar

from .errors import MalformedOffsetToken
from .logging import get_logger
from .models import UNIT_MILLIS, DueIssue, DueSpec, IssueRecord, Offset

T = TypeVar('T')

HEADER_DELIMITER = '---'

_FIELD_RE = {
    key: re.compile(rf'^[ \t]*{re.escape(key)}[ \t]*:(.*)$', re.MULTILINE)
    for key in ('due-date', 'due-time', 'time-zone', 'reminders')
}
# ASCII digits only; the header grammar is bit-exact
_DATE_RE = re.compile(r'([0-9]{4})-([0-9]{2})-([0-9]{2})')
_TIME_RE = re.compile(r'([0-9]{2}):([0-9]{2})')
_UTC_OFFSET_RE = re.compile(r'UTC([+-])([0-9]{2}):([0-9]{2})')
_OFFSET_RE = re.compile(r'([+-]?[0-9]+)([a-zA-Z]+)')

_MAX_HOUR = 23
_MAX_MINUTE = 59


def split_header(body: str | None) -> str:
    """Return the text before the first ``---`` delimiter (whole body if none)."""
    return (body or '').split(HEADER_DELIMITER, 1)[0]


def _field_values(header: str, key: str) -> list[str]:
    return [m.group(1).strip() for m in _FIELD_RE[key].finditer(header)]


def _first_valid(
    header: str,
    key: str,
    parse: Callable[[str], T | None],
    *,
    issue_number: int | None = None,
) -> T | None:
    for raw in _field_values(header, key):
        value = parse(raw)
        if value is not None:
            return value
        get_logger().debug(
            f'ignoring malformed {key} {raw!r}',
            operation='parse_header',
            issue_number=issue_number,
        )
    return None


def parse_date(value: str) -> date | None:
    m = _DATE_RE.fullmatch(value)
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def parse_time(value: str) -> time | None:
    m = _TIME_RE.fullmatch(value)
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > _MAX_HOUR or minute > _MAX_MINUTE:
        return None
    return time(hour, minute)


def parse_utc_offset(value: str) -> timezone | None:
    """Parse ``UTC+HH:MM`` / ``UTC-HH:MM`` into a fixed-offset timezone."""
    m = _UTC_OFFSET_RE.fullmatch(value.strip())
    if not m:
        return None
    hours, minutes = int(m.group(2)), int(m.group(3))
    if hours > _MAX_HOUR or minutes > _MAX_MINUTE:
        return None
    sign = -1 if m.group(1) == '-' else 1
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_offset(token: str) -> Offset:
    m = _OFFSET_RE.fullmatch(token)
    if not m:
        raise MalformedOffsetToken(token)
    unit = m.group(2)
    if unit not in UNIT_MILLIS:
        raise MalformedOffsetToken(token, 'unknown reminder unit')
    try:
        offset = Offset(magnitude=int(m.group(1)), unit=unit)
        offset.as_timedelta()
    except (OverflowError, ValueError) as exc:
        raise MalformedOffsetToken(token, 'reminder offset out of range') from exc
    return offset


def parse_offsets(value: str, *, issue_number: int | None = None) -> tuple[Offset, ...]:
    offsets: list[Offset] = []
    for token in value.split():
        try:
            offsets.append(parse_offset(token))
        except MalformedOffsetToken as exc:
            get_logger().warning(
                f'skipping reminder token {token!r}: {exc}',
                operation='parse_reminders',
                token=token,
                issue_number=issue_number,
            )
    return tuple(offsets)


def build_due_instant(
    due_date: date,
    due_time: time | None,
    tz: tzinfo | None,
    *,
    default_tz: tzinfo = timezone.utc,
) -> datetime:
    # date+time+zone, date+time (reference zone), date+zone (midnight), date only
    if due_time is not None and tz is not None:
        return datetime.combine(due_date, due_time, tzinfo=tz)
    if due_time is not None:
        return datetime.combine(due_date, due_time, tzinfo=default_tz)
    if tz is not None:
        return datetime.combine(due_date, time(0, 0), tzinfo=tz)
    return datetime.combine(due_date, time(0, 0), tzinfo=default_tz)


def parse_due_spec(
    body: str | None,
    *,
    default_tz: tzinfo = timezone.utc,
    issue_number: int | None = None,
) -> DueSpec | None:
    """Extract a :class:`DueSpec` from an issue body, or ``None`` without a valid due date."""
    header = split_header(body)
    due_date = _first_valid(header, 'due-date', parse_date, issue_number=issue_number)
    if due_date is None:
        return None
    due_time = _first_valid(header, 'due-time', parse_time, issue_number=issue_number)
    zone = _first_valid(header, 'time-zone', parse_utc_offset, issue_number=issue_number)

    reminder_lines = _field_values(header, 'reminders')
    offsets = (
        parse_offsets(reminder_lines[0], issue_number=issue_number) if reminder_lines else ()
    )
    due = build_due_instant(due_date, due_time, zone, default_tz=default_tz)
    return DueSpec(due=due, offsets=offsets)


def extract_due_issue(
    issue: IssueRecord, *, default_tz: tzinfo = timezone.utc
) -> DueIssue | None:
    spec = parse_due_spec(issue.body, default_tz=default_tz, issue_number=issue.number)
    if spec is None:
        return None
    return DueIssue(issue=issue, spec=spec)


__all__ = [
    'HEADER_DELIMITER',
    'split_header',
    'parse_date',
    'parse_time',
    'parse_utc_offset',
    'parse_offset',
    'parse_offsets',
    'build_due_instant',
    'parse_due_spec',
    'extract_due_issue',
]
