from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol

from .dates import DAY_MS, HOUR_MS, MINUTE_MS, WEEK_MS

UNIT_MILLIS: dict[str, int] = {
    "m": MINUTE_MS,
    "h": HOUR_MS,
    "d": DAY_MS,
    "w": WEEK_MS,
}


@dataclass(frozen=True)
class IssueRecord:
    """Open issue as returned by the issue repository.

    Owned by the repository; the due-date logic only reads it. Derived values
    travel alongside it in :class:`DueIssue` instead of being attached here.
    """

    number: int
    title: str
    body: str
    labels: tuple[str, ...] = ()
    assignees: tuple[str, ...] = ()
    state: str = "open"


@dataclass(frozen=True)
class Offset:
    magnitude: int  # signed
    unit: str  # one of UNIT_MILLIS

    @property
    def millis(self) -> int:
        return self.magnitude * UNIT_MILLIS[self.unit]

    def as_timedelta(self) -> timedelta:
        return timedelta(milliseconds=self.millis)

    def __str__(self) -> str:
        return f"{self.magnitude}{self.unit}"


@dataclass(frozen=True)
class DueSpec:
    due: datetime
    offsets: tuple[Offset, ...] = ()


@dataclass(frozen=True)
class DueIssue:
    issue: IssueRecord
    spec: DueSpec


class UrgencyBucket(Enum):
    OVERDUE = "overdue"
    DUE_TODAY = "due-today"
    DUE_SOON = "due-soon"
    DUE_LATER = "due-later"


class IssueRepository(Protocol):
    """Operations the due-date run needs from the hosting service."""

    def list_open_issues(self) -> list[IssueRecord]: ...

    def set_labels(
        self,
        issue: IssueRecord,
        labels_to_remove: Iterable[str],
        labels_to_add: Iterable[str],
    ) -> bool: ...

    def post_comment(self, number: int, text: str) -> None: ...


__all__ = [
    "UNIT_MILLIS",
    "IssueRecord",
    "Offset",
    "DueSpec",
    "DueIssue",
    "UrgencyBucket",
    "IssueRepository",
]
