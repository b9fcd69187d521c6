"""GitHub issue repository used by the due-date run.

Wraps :class:`~issuedue.github_rest.GitHubRestClient` behind the
``IssueRepository`` operations (list open issues, set labels, post comment)
and normalises raw API payloads into :class:`~issuedue.models.IssueRecord`.

Modes:
 - ``dry_run``: issues are listed for real; label and comment mutations are
   logged and skipped
 - ``mock``: no network at all; listing returns nothing and mutations are
   only logged
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .errors import RepositoryCallFailure
from .github_rest import DEFAULT_API_URL, GitHubRestClient
from .logging import get_logger
from .models import IssueRecord
from .urgency import plan_labels


@dataclass
class IssuesClientConfig:
    repo: str | None = None  # owner/repo
    token: str | None = None
    api_url: str = DEFAULT_API_URL
    mock: bool = False
    dry_run: bool = False


class IssuesClient:
    """Issue repository over the GitHub REST API.

    Failures surface as :class:`~issuedue.errors.RepositoryCallFailure`
    (``GitHubAPIError`` for HTTP problems); nothing is retried here.
    """

    def __init__(self, cfg: IssuesClientConfig, rest_client: GitHubRestClient | None = None):
        self.cfg = cfg
        self.logger = get_logger()
        self._rest_client: GitHubRestClient | None
        if rest_client is not None:
            self._rest_client = rest_client
        else:
            self._rest_client = self._build_rest_client()

    def _build_rest_client(self) -> GitHubRestClient | None:
        if self.cfg.mock:
            return None
        token = (self.cfg.token or "").strip()
        repo = (self.cfg.repo or "").strip()
        if not token or not repo:
            return None
        return GitHubRestClient(token=token, repo=repo, base_url=self.cfg.api_url)

    def _require_rest_client(self) -> GitHubRestClient:
        if self._rest_client is None:
            raise RepositoryCallFailure(
                "GitHub client unavailable: repository and token are required"
            )
        return self._rest_client

    # --- IssueRepository ---------------------------------------------------
    def list_open_issues(self) -> list[IssueRecord]:
        if self.cfg.mock:
            self.logger.info("MOCK list open issues", repo=self.cfg.repo)
            return []
        data = self._require_rest_client().list_issues(state="open")
        # the issues endpoint also returns pull requests
        return [
            self._normalize_issue(entry) for entry in data if "pull_request" not in entry
        ]

    def set_labels(
        self,
        issue: IssueRecord,
        labels_to_remove: Iterable[str],
        labels_to_add: Iterable[str],
    ) -> bool:
        """Replace bucket labels on ``issue``; returns False when no call was needed."""
        to_add = list(labels_to_add)
        planned = plan_labels(issue.labels, labels_to_remove, to_add)
        if planned is None:
            self.logger.debug(
                f"Not updating labels for issue #{issue.number}, no changes.",
                issue_number=issue.number,
            )
            return False
        skipped = self.cfg.mock or self.cfg.dry_run
        self.logger.log_issue_action(
            "labels", issue.number, dry_run=skipped, labels=planned, added=to_add
        )
        if skipped:
            return True
        self._require_rest_client().set_labels(number=issue.number, labels=planned)
        return True

    def post_comment(self, number: int, text: str) -> None:
        skipped = self.cfg.mock or self.cfg.dry_run
        self.logger.log_issue_action("comment", number, dry_run=skipped, body=text)
        if skipped:
            return
        self._require_rest_client().create_comment(number=number, body=text)

    # --- helpers -------------------------------------------------------------
    @staticmethod
    def _names(raw: Any, key: str) -> tuple[str, ...]:
        names: list[str] = []
        if isinstance(raw, list):
            for item in raw:
                if isinstance(item, dict):
                    value = item.get(key)
                    if isinstance(value, str):
                        names.append(value)
                elif isinstance(item, str):
                    names.append(item)
        return tuple(names)

    @classmethod
    def _normalize_issue(cls, entry: dict[str, Any]) -> IssueRecord:
        body = entry.get("body")
        return IssueRecord(
            number=int(entry.get("number") or 0),
            title=str(entry.get("title") or ""),
            body=body if isinstance(body, str) else "",
            labels=cls._names(entry.get("labels"), "name"),
            assignees=cls._names(entry.get("assignees"), "login"),
            state=str(entry.get("state") or "open"),
        )


__all__ = ["IssuesClientConfig", "IssuesClient"]
