"""issuedue CLI.

Subcommands:
  run      -> scan open issues, label by urgency bucket, post due reminders
  inspect  -> parse one issue body (file or stdin) and print the decision JSON
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any

from issuedue.config import ConfigError, DueConfig, parse_reminder_window, resolve_config
from issuedue.env_auth import create_env_auth_manager
from issuedue.errors import RepositoryCallFailure, classify_error
from issuedue.github_issues import IssuesClient, IssuesClientConfig
from issuedue.logging import configure_logging
from issuedue.models import DueIssue, IssueRecord
from issuedue.orchestrator import run_due_dates
from issuedue.parser import parse_due_spec
from issuedue.urgency import evaluate

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="issuedue", description="Due-date labels and reminders for GitHub issues"
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    pr = sub.add_parser("run", help="Label open issues by due date and post reminders")
    pr.add_argument("--config", help="YAML config (default: issuedue.config.yaml if present)")
    pr.add_argument("--repo", help="Override target repository (owner/repo)")
    pr.add_argument("--dry-run", action="store_true", help="List issues but skip mutations")
    pr.add_argument("--mock", action="store_true", help="No network calls at all")
    pr.add_argument("--now", help="Evaluate as of this ISO-8601 instant")
    pr.add_argument("--reminder-window", help="Reminder window in minutes")
    pr.add_argument("--summary-json", help="Write the run summary to this file")
    pr.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")

    pi = sub.add_parser("inspect", help="Parse an issue body and show the due-date decision")
    pi.add_argument("file", nargs="?", help="File holding the issue body (default: stdin)")
    pi.add_argument("--config", help="YAML config (default: issuedue.config.yaml if present)")
    pi.add_argument("--now", help="Evaluate as of this ISO-8601 instant")
    pi.add_argument(
        "--assignee", action="append", default=[], help="Assignee login (repeatable)"
    )
    return p


def _parse_now(value: str | None, tz: tzinfo) -> datetime | None:
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ConfigError(f"--now must be an ISO-8601 timestamp, got {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def _apply_run_overrides(cfg: DueConfig, args: argparse.Namespace) -> DueConfig:
    if args.repo:
        cfg = replace(cfg, github_repo=args.repo)
    if args.reminder_window is not None:
        cfg = replace(cfg, reminder_window=parse_reminder_window(args.reminder_window))
    return cfg


def _cmd_run(args: argparse.Namespace) -> int:
    cfg = _apply_run_overrides(resolve_config(args.config), args)
    logger = configure_logging(
        json_logging=args.json_logs or cfg.logging_json_enabled, level=cfg.logging_level
    )
    now = _parse_now(args.now, cfg.reference_timezone)
    token = create_env_auth_manager(
        load_dotenv=cfg.env_auth_load_dotenv, dotenv_path=cfg.env_auth_dotenv_path
    ).get_github_token()
    if not args.mock:
        if not cfg.github_repo:
            logger.log_error("no repository configured (use --repo or GITHUB_REPOSITORY)")
            return 1
        if not token:
            logger.log_error("GITHUB_TOKEN environment variable is not set.")
            return 1
    client = IssuesClient(
        IssuesClientConfig(
            repo=cfg.github_repo,
            token=token,
            api_url=cfg.github_api_url,
            mock=args.mock,
            dry_run=args.dry_run,
        )
    )
    try:
        summary = run_due_dates(client, cfg, now=now)
    except RepositoryCallFailure as exc:
        info = classify_error(exc)
        logger.log_error("listing open issues failed", error=info.message, category=info.category)
        return 1
    payload = summary.to_dict()
    if args.summary_json:
        Path(args.summary_json).write_text(json.dumps(payload, indent=2) + "\n")
    totals = payload["totals"]
    print(
        f"[run] candidates={totals['candidates']} skipped={totals['skipped']} "
        f"comments={totals['comments']} label_updates={totals['label_updates']} "
        f"failures={totals['failures']}"
    )
    return 0 if summary.ok else 1


def _read_body(path: str | None) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _cmd_inspect(args: argparse.Namespace) -> int:
    cfg = resolve_config(args.config)
    # keep stdout for the JSON document
    configure_logging(level=cfg.logging_level, stream=sys.stderr)
    now = _parse_now(args.now, cfg.reference_timezone) or datetime.now(cfg.reference_timezone)
    body = _read_body(args.file)
    spec = parse_due_spec(body, default_tz=cfg.reference_timezone)
    if spec is None:
        print(json.dumps({"candidate": False, "now": now.isoformat()}, indent=2))
        return 0
    issue = IssueRecord(number=0, title="", body=body, assignees=tuple(args.assignee))
    decision = evaluate(
        DueIssue(issue=issue, spec=spec),
        now,
        window_minutes=cfg.reminder_window,
        labels=cfg.labels,
        tz=cfg.reference_timezone,
    )
    out = {
        "candidate": True,
        "now": now.isoformat(),
        "due": decision.due.isoformat(),
        "offsets": [str(o) for o in spec.offsets],
        "reminders": [r.isoformat() for r in decision.reminders],
        "days_until_due": decision.days_until_due,
        "bucket": decision.bucket.value,
        "label": decision.label,
        "fired_reminder": decision.fired_reminder.isoformat() if decision.fired_reminder else None,
        "comment": decision.comment,
    }
    print(json.dumps(out, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    handlers = {
        "run": lambda: _cmd_run(args),
        "inspect": lambda: _cmd_inspect(args),
    }
    handler = handlers.get(args.cmd)
    if handler is None:  # pragma: no cover - argparse enforces valid choices
        parser.print_help()
        return 1
    try:
        return int(handler())
    except ConfigError as exc:
        info = classify_error(exc)
        print(f"[{info.category}] {info.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
