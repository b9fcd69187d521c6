"""Turn relative reminder offsets into absolute reminder instants.

Arithmetic is linear in milliseconds (no month or DST awareness): a ``1d``
reminder is always exactly 86 400 000 ms before the due instant.
"""

from __future__ import annotations

from datetime import datetime

from .logging import get_logger
from .models import DueSpec, Offset


def resolve_reminder(due: datetime, offset: Offset) -> datetime:
    """Return ``due - offset``; raises ``OverflowError`` outside the datetime range."""
    return due - offset.as_timedelta()


def resolve_reminders(spec: DueSpec) -> list[datetime]:
    """One instant per offset, in the order written; duplicates are kept.

    Offsets that land outside the representable datetime range are skipped
    with a warning.
    """
    reminders: list[datetime] = []
    for offset in spec.offsets:
        try:
            reminders.append(resolve_reminder(spec.due, offset))
        except OverflowError as exc:
            get_logger().warning(
                f'skipping reminder {offset} before {spec.due.isoformat()}: {exc}',
                operation='resolve_reminders',
                offset=str(offset),
            )
    return reminders


__all__ = ["resolve_reminder", "resolve_reminders"]
