from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import timezone
from pathlib import Path
from typing import Any, cast

import yaml

from .parser import parse_utc_offset
from .urgency import BucketLabels

CONFIG_DEFAULT = 'issuedue.config.yaml'
DEFAULT_REMINDER_WINDOW = 30

_INPUT_LABELS = {
    'overdue': 'INPUT_OVERDUE_LABEL',
    'due_today': 'INPUT_DUE_TODAY_LABEL',
    'due_soon': 'INPUT_DUE_SOON_LABEL',
    'due_later': 'INPUT_DUE_LATER_LABEL',
}


class ConfigError(RuntimeError):
    pass


@dataclass
class DueConfig:
    source_file: Path | None = None
    github_repo: str | None = None
    github_api_url: str = 'https://api.github.com'
    labels: BucketLabels = field(default_factory=BucketLabels)
    reminder_window: int = DEFAULT_REMINDER_WINDOW
    reference_timezone: timezone = timezone.utc
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = 'INFO'
    # Environment authentication configuration
    env_auth_load_dotenv: bool = True
    env_auth_dotenv_path: str | None = None


def _resolve_env_var(value: Any) -> Any:
    """Resolve ``$NAME`` values from the environment."""
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:]) or None
    return value


def parse_reminder_window(value: Any) -> int:
    try:
        window = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ConfigError(f'reminder window must be an integer, got {value!r}') from exc
    if window < 0:
        raise ConfigError(f'reminder window must be non-negative, got {window}')
    return window


def parse_reference_timezone(value: Any) -> timezone:
    text = str(value or 'UTC').strip()
    if text.upper() in {'UTC', 'Z'}:
        return timezone.utc
    tz = parse_utc_offset(text)
    if tz is None:
        raise ConfigError(f'reference timezone must be UTC or UTC±HH:MM, got {text!r}')
    return tz


def _build_labels(raw: Mapping[str, Any]) -> BucketLabels:
    defaults = BucketLabels()
    labels = BucketLabels(
        overdue=str(raw.get('overdue') or defaults.overdue),
        due_today=str(raw.get('due_today') or defaults.due_today),
        due_soon=str(raw.get('due_soon') or defaults.due_soon),
        due_later=str(raw.get('due_later') or defaults.due_later),
    )
    _check_labels(labels)
    return labels


def _check_labels(labels: BucketLabels) -> None:
    names = labels.all()
    if len(set(names)) != len(names):
        raise ConfigError(f'bucket labels must be distinct, got {list(names)}')


def default_config() -> DueConfig:
    return DueConfig()


def load_config(path: str | Path) -> DueConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f'Configuration file not found: {p}')
    try:
        loaded = yaml.safe_load(p.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {p}: {exc}') from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f'Configuration in {p} must be a mapping')
    raw = cast(dict[str, Any], loaded)
    gh = cast(dict[str, Any], raw.get('github', {}) or {})
    labels = cast(dict[str, Any], raw.get('labels', {}) or {})
    reminders = cast(dict[str, Any], raw.get('reminders', {}) or {})
    time_config = cast(dict[str, Any], raw.get('time', {}) or {})
    logging_config = cast(dict[str, Any], raw.get('logging', {}) or {})
    env_auth = cast(dict[str, Any], raw.get('environment', {}) or {})

    return DueConfig(
        source_file=p,
        github_repo=_resolve_env_var(gh.get('repo')),
        github_api_url=gh.get('api_url', 'https://api.github.com'),
        labels=_build_labels(labels),
        reminder_window=parse_reminder_window(
            reminders.get('window_minutes', DEFAULT_REMINDER_WINDOW)
        ),
        reference_timezone=parse_reference_timezone(time_config.get('reference_timezone')),
        logging_json_enabled=bool(logging_config.get('json_enabled', False)),
        logging_level=str(logging_config.get('level', 'INFO')),
        env_auth_load_dotenv=bool(env_auth.get('load_dotenv', True)),
        env_auth_dotenv_path=env_auth.get('dotenv_path'),
    )


def apply_env_overrides(cfg: DueConfig, environ: Mapping[str, str] | None = None) -> DueConfig:
    """Apply GitHub Actions style inputs (``INPUT_*``) and ``GITHUB_REPOSITORY``."""
    env = os.environ if environ is None else environ
    label_overrides = {
        attr: env[var].strip()
        for attr, var in _INPUT_LABELS.items()
        if env.get(var, '').strip()
    }
    labels = replace(cfg.labels, **label_overrides) if label_overrides else cfg.labels
    _check_labels(labels)
    window = cfg.reminder_window
    raw_window = env.get('INPUT_REMINDER_WINDOW', '').strip()
    if raw_window:
        window = parse_reminder_window(raw_window)
    repo = cfg.github_repo or env.get('GITHUB_REPOSITORY', '').strip() or None
    return replace(cfg, labels=labels, reminder_window=window, github_repo=repo)


def resolve_config(path: str | Path | None) -> DueConfig:
    """Load ``path`` (or the default file when present) and apply env overrides."""
    if path is not None:
        cfg = load_config(path)
    elif Path(CONFIG_DEFAULT).exists():
        cfg = load_config(CONFIG_DEFAULT)
    else:
        cfg = default_config()
    return apply_env_overrides(cfg)


__all__ = [
    'CONFIG_DEFAULT',
    'ConfigError',
    'DueConfig',
    'apply_env_overrides',
    'default_config',
    'load_config',
    'parse_reference_timezone',
    'parse_reminder_window',
    'resolve_config',
]
