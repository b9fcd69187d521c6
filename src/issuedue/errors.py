"""Error taxonomy & redaction helpers.

Three failure kinds matter to a due-date run:

- a malformed or missing ``due-date`` token: not an error, the issue is
  simply not a candidate (the parser returns ``None``)
- :class:`MalformedOffsetToken`: one reminder token is skipped, the rest of
  the line still resolves
- :class:`RepositoryCallFailure`: a listing / label / comment call failed;
  the orchestrator records it for that issue and moves on

``classify_error`` turns an exception into an :class:`ErrorInfo` suitable for
structured logs and the run summary; ``redact`` strips tokens first.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ghp_[A-Za-z0-9]{20,40}"),  # GitHub classic tokens
    re.compile(r"ghs_[A-Za-z0-9]{20,40}"),  # Actions installation tokens
    re.compile(r"github_pat_\w{20,}"),  # GitHub fine-grained tokens
    re.compile(r"(?i)(authorization:\s*bearer\s+)\S+"),
]

_REDACTION_PLACEHOLDER = "<redacted>"

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403


class MalformedOffsetToken(ValueError):
    """A single ``reminders:`` token could not be parsed."""

    def __init__(self, token: str, reason: str = "unparseable reminder token"):
        super().__init__(f"{reason}: {token!r}")
        self.token = token


class RepositoryCallFailure(RuntimeError):
    """An issue repository call (list / label / comment) failed."""


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None


def redact(text: str) -> str:
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        if pat.groups:
            redacted = pat.sub(lambda m: m.group(1) + _REDACTION_PLACEHOLDER, redacted)
        else:
            redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception.

    - ``ConfigError`` -> 'config' (CLI usage and config file problems)
    - rate limit / abuse wording -> 'github.rate_limit', transient
    - HTTP 401/403 without rate-limit wording -> 'github.auth'
    - timeouts and connection problems -> 'network', transient
    - fallback -> 'generic'
    """
    msg = str(exc) if exc else ""
    low = msg.lower()
    status = getattr(exc, "status", None)
    details = {"status": status} if status is not None else None
    name = exc.__class__.__name__

    if name == "ConfigError":
        return ErrorInfo("config", redact(msg), name)
    if "rate limit" in low or "secondary rate" in low or "abuse" in low:
        return ErrorInfo("github.rate_limit", redact(msg), name, transient=True, details=details)
    if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
        return ErrorInfo("github.auth", redact(msg), name, details=details)
    if any(k in low for k in ("timeout", "timed out", "connection", "temporarily unavailable")):
        return ErrorInfo("network", redact(msg), name, transient=True, details=details)
    return ErrorInfo("generic", redact(msg), name, details=details)


__all__ = [
    "ErrorInfo",
    "MalformedOffsetToken",
    "RepositoryCallFailure",
    "classify_error",
    "redact",
]
