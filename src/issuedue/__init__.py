"""issuedue - due-date labels and reminder comments for GitHub issues.

Issue bodies carry a small header before a ``---`` line::

    due-date: 2024-06-01
    due-time: 09:00
    time-zone: UTC-05:00
    reminders: 1d 2h

High-level API:

from issuedue import IssuesClient, IssuesClientConfig, resolve_config, run_due_dates

cfg = resolve_config(None)
client = IssuesClient(IssuesClientConfig(repo='owner/name', token='...'))
summary = run_due_dates(client, cfg)
print(summary.to_dict()['totals'])
"""

from __future__ import annotations

from .config import DueConfig, load_config, resolve_config
from .github_issues import IssuesClient, IssuesClientConfig
from .models import DueIssue, DueSpec, IssueRecord, Offset, UrgencyBucket
from .orchestrator import RunSummary, run_due_dates
from .parser import parse_due_spec

__version__ = "0.1.0"

__all__ = [
    "DueConfig",
    "DueIssue",
    "DueSpec",
    "IssueRecord",
    "IssuesClient",
    "IssuesClientConfig",
    "Offset",
    "RunSummary",
    "UrgencyBucket",
    "load_config",
    "parse_due_spec",
    "resolve_config",
    "run_due_dates",
    "__version__",
]
