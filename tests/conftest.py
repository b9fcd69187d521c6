"""Pytest configuration for issuedue tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install, and provides a fake issue repository
so orchestration tests never touch the network.
"""

from __future__ import annotations

import io
import sys
from collections.abc import Iterable
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from issuedue.errors import RepositoryCallFailure  # noqa: E402
from issuedue.logging import configure_logging  # noqa: E402
from issuedue.models import IssueRecord  # noqa: E402
from issuedue.urgency import plan_labels  # noqa: E402


class FakeRepository:
    """In-memory issue repository recording every mutation."""

    def __init__(self, issues: Iterable[IssueRecord], fail_on: Iterable[int] = ()):
        self.issues = {issue.number: issue for issue in issues}
        self.fail_on = set(fail_on)
        self.label_calls: list[tuple[int, list[str]]] = []
        self.comments: list[tuple[int, str]] = []
        self.list_calls = 0

    def list_open_issues(self) -> list[IssueRecord]:
        self.list_calls += 1
        return list(self.issues.values())

    def set_labels(
        self,
        issue: IssueRecord,
        labels_to_remove: Iterable[str],
        labels_to_add: Iterable[str],
    ) -> bool:
        if issue.number in self.fail_on:
            raise RepositoryCallFailure(f"label update for #{issue.number} failed")
        planned = plan_labels(issue.labels, labels_to_remove, labels_to_add)
        if planned is None:
            return False
        self.label_calls.append((issue.number, planned))
        current = self.issues[issue.number]
        self.issues[issue.number] = IssueRecord(
            number=current.number,
            title=current.title,
            body=current.body,
            labels=tuple(planned),
            assignees=current.assignees,
            state=current.state,
        )
        return True

    def post_comment(self, number: int, text: str) -> None:
        if number in self.fail_on:
            raise RepositoryCallFailure(f"comment on #{number} failed")
        self.comments.append((number, text))


@pytest.fixture
def log_stream() -> io.StringIO:
    stream = io.StringIO()
    configure_logging(level="DEBUG", stream=stream)
    return stream
