from pathlib import Path

import pytest

from issuedue.env_auth import EnvAuthConfig, EnvironmentAuthManager, create_env_auth_manager

_TOKEN_VARS = ("GITHUB_TOKEN", "INPUT_GITHUB_TOKEN", "GH_TOKEN", "GITHUB_PAT")


@pytest.fixture
def clean_env(monkeypatch):
    for var in _TOKEN_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


def test_env_auth_config_defaults():
    config = EnvAuthConfig()
    assert config.load_dotenv is True
    assert config.dotenv_path is None
    assert config.github_token_var == "GITHUB_TOKEN"


def test_no_token(clean_env):
    manager = EnvironmentAuthManager(EnvAuthConfig(load_dotenv=False))
    assert manager.get_github_token() is None


def test_primary_token_wins(clean_env):
    clean_env.setenv("GITHUB_TOKEN", "primary")
    clean_env.setenv("GH_TOKEN", "secondary")
    manager = EnvironmentAuthManager(EnvAuthConfig(load_dotenv=False))
    assert manager.get_github_token() == "primary"


def test_action_input_token(clean_env):
    clean_env.setenv("INPUT_GITHUB_TOKEN", "  from-input  ")
    manager = create_env_auth_manager(load_dotenv=False)
    assert manager.get_github_token() == "from-input"


def test_dotenv_file_is_loaded(clean_env, tmp_path: Path):
    var = "ISSUEDUE_DOTENV_TOKEN"
    # register restore-to-unset for the variable load_dotenv will set
    clean_env.setenv(var, "placeholder")
    clean_env.delenv(var)
    env_file = tmp_path / "custom.env"
    env_file.write_text(f"{var}=from-dotenv\n")

    manager = EnvironmentAuthManager(
        EnvAuthConfig(dotenv_path=str(env_file), github_token_var=var)
    )

    assert manager.dotenv_loaded
    assert manager.get_github_token() == "from-dotenv"


def test_missing_dotenv_is_ignored(clean_env, tmp_path: Path):
    clean_env.chdir(tmp_path)
    manager = EnvironmentAuthManager(EnvAuthConfig())
    assert not manager.dotenv_loaded
