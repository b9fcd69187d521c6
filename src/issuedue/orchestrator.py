"""Due-date run orchestration.

One run lists the open issues once, then for each issue with a valid due
date: evaluates bucket and reminder against a single ``now`` captured at the
start of the run, posts at most one reminder comment and reconciles the
bucket label. A repository failure on one issue is recorded in the summary
and the run continues with the next issue.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .config import DueConfig
from .dates import utc_now
from .errors import RepositoryCallFailure, classify_error
from .logging import get_logger
from .models import DueIssue, IssueRepository
from .parser import extract_due_issue
from .urgency import Decision, evaluate


@dataclass
class IssueOutcome:
    decision: Decision
    commented: bool = False
    labels_changed: bool = False

    def to_dict(self) -> dict[str, Any]:
        d = self.decision
        return {
            "number": d.number,
            "due": d.due.isoformat(),
            "days_until_due": d.days_until_due,
            "bucket": d.bucket.value,
            "label": d.label,
            "reminders": [r.isoformat() for r in d.reminders],
            "fired_reminder": d.fired_reminder.isoformat() if d.fired_reminder else None,
            "commented": self.commented,
            "labels_changed": self.labels_changed,
        }


@dataclass
class RunSummary:
    now: datetime
    outcomes: list[IssueOutcome] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failures: list[dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def bucket_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for outcome in self.outcomes:
            key = outcome.decision.bucket.value
            counts[key] = counts.get(key, 0) + 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "now": self.now.isoformat(),
            "totals": {
                "candidates": len(self.outcomes),
                "skipped": len(self.skipped),
                "comments": sum(1 for o in self.outcomes if o.commented),
                "label_updates": sum(1 for o in self.outcomes if o.labels_changed),
                "failures": len(self.failures),
                "buckets": self.bucket_counts(),
            },
            "issues": [o.to_dict() for o in self.outcomes],
            "skipped": list(self.skipped),
            "failures": list(self.failures),
        }


def process_issue(
    repo: IssueRepository, due_issue: DueIssue, now: datetime, cfg: DueConfig
) -> IssueOutcome:
    logger = get_logger()
    issue = due_issue.issue
    decision = evaluate(
        due_issue,
        now,
        window_minutes=cfg.reminder_window,
        labels=cfg.labels,
        tz=cfg.reference_timezone,
    )
    logger.info(
        f"Issue #{issue.number} -> Due date: {decision.due.isoformat()}",
        issue_number=issue.number,
        bucket=decision.bucket.value,
    )
    if decision.reminders:
        logger.debug(
            f"Issue #{issue.number} has reminders: "
            + ", ".join(r.isoformat() for r in decision.reminders),
            issue_number=issue.number,
        )
    outcome = IssueOutcome(decision=decision)
    if decision.comment is not None and decision.fired_reminder is not None:
        logger.debug(
            f"Reminder {decision.fired_reminder.isoformat()} for issue #{issue.number} "
            f"is within the {cfg.reminder_window}m window",
            issue_number=issue.number,
        )
        repo.post_comment(issue.number, decision.comment)
        outcome.commented = True
    outcome.labels_changed = repo.set_labels(
        issue, decision.labels_to_remove, [decision.label]
    )
    return outcome


def run_due_dates(
    repo: IssueRepository, cfg: DueConfig, *, now: datetime | None = None
) -> RunSummary:
    """Process every open issue once; ``now`` is sampled a single time per run."""
    logger = get_logger()
    current = now if now is not None else utc_now()
    summary = RunSummary(now=current)
    logger.info(f"Current time: {current.isoformat()}")
    with logger.timed_operation("due_dates_run"):
        issues = repo.list_open_issues()
        for issue in issues:
            due_issue = extract_due_issue(issue, default_tz=cfg.reference_timezone)
            if due_issue is None:
                summary.skipped.append(issue.number)
                continue
            try:
                summary.outcomes.append(process_issue(repo, due_issue, current, cfg))
            except RepositoryCallFailure as exc:
                info = classify_error(exc)
                logger.log_error(
                    f"issue #{issue.number} failed",
                    error=info.message,
                    issue_number=issue.number,
                    category=info.category,
                )
                summary.failures.append(
                    {
                        "number": issue.number,
                        "category": info.category,
                        "message": info.message,
                        "transient": info.transient,
                    }
                )
    logger.log_operation(
        "due_dates_summary",
        candidates=len(summary.outcomes),
        skipped=len(summary.skipped),
        failures=len(summary.failures),
    )
    return summary


__all__ = ["IssueOutcome", "RunSummary", "process_issue", "run_due_dates"]
