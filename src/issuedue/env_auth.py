"""Environment-based authentication for issuedue.

Resolves the GitHub token from the environment, optionally loading a
``.env`` file first (python-dotenv). Inside GitHub Actions the token usually
arrives as ``GITHUB_TOKEN`` or as the ``INPUT_GITHUB_TOKEN`` action input.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .logging import get_logger

_TOKEN_ALTERNATIVES = ("INPUT_GITHUB_TOKEN", "GH_TOKEN", "GITHUB_PAT")


@dataclass
class EnvAuthConfig:
    """Configuration for environment-based authentication."""

    load_dotenv: bool = True
    dotenv_path: str | None = None
    github_token_var: str = "GITHUB_TOKEN"


class EnvironmentAuthManager:
    """Manages authentication through environment variables and .env files."""

    def __init__(self, config: EnvAuthConfig):
        self.config = config
        self.logger = get_logger()
        self._dotenv_loaded = False
        if config.load_dotenv:
            self._load_dotenv()

    @property
    def dotenv_loaded(self) -> bool:
        return self._dotenv_loaded

    def _load_dotenv(self) -> None:
        candidates = (
            [self.config.dotenv_path] if self.config.dotenv_path else [".env", ".env.local"]
        )
        for location in candidates:
            env_path = Path(location)
            if env_path.exists():
                load_dotenv(str(env_path))
                self._dotenv_loaded = True
                self.logger.debug(f"Loaded environment variables from {env_path}")
                return

    def get_github_token(self) -> str | None:
        """Get GitHub token from environment variables."""
        for var in (self.config.github_token_var, *_TOKEN_ALTERNATIVES):
            token = (os.getenv(var) or "").strip()
            if token:
                self.logger.debug(f"Found GitHub token in {var}")
                return token
        return None


def create_env_auth_manager(
    load_dotenv: bool = True, dotenv_path: str | None = None
) -> EnvironmentAuthManager:
    return EnvironmentAuthManager(EnvAuthConfig(load_dotenv=load_dotenv, dotenv_path=dotenv_path))


__all__ = ["EnvAuthConfig", "EnvironmentAuthManager", "create_env_auth_manager"]
