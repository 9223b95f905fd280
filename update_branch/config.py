"""Configuration loading from YAML, environment and GitHub Actions inputs.

Secrets (tokens) are taken from environment variables or from files
(Docker secrets). Never put real tokens in config files committed to the
repo. When running as a GitHub Action, INPUT_* variables (token,
autoMergeMethod, requiredApprovals, requiredStatusChecks, requiredLabels)
override the YAML file and GITHUB_REPOSITORY supplies the repository.
"""

import os
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BeforeValidator, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from update_branch.models import Condition

MERGE_METHODS = {"MERGE", "SQUASH", "REBASE"}

# Action input name -> MergeConfig field
ACTION_INPUTS = {
    "INPUT_AUTOMERGEMETHOD": "auto_merge_method",
    "INPUT_REQUIREDAPPROVALS": "required_approvals",
    "INPUT_REQUIREDSTATUSCHECKS": "required_status_checks",
    "INPUT_REQUIREDLABELS": "required_labels",
}


class ConfigError(ValueError):
    """Raised when required settings are missing."""

    pass


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so validators can read env/file
_current_env: dict[str, str] = {}


def _split_lines(value: Any) -> Any:
    """Accept a newline-separated string (action input style) as a list."""
    if value is None:
        return []
    if isinstance(value, str):
        return [line.strip() for line in value.splitlines() if line.strip()]
    return value


NameList = Annotated[list[str], NoDecode, BeforeValidator(_split_lines)]


class BotConfig(BaseSettings):
    """Target repository."""

    model_config = SettingsConfigDict(env_prefix="BOT_", extra="ignore")

    repository: str = Field(default="", description="Target repo e.g. lcdsmao/update-branch")


class GitHubConfig(BaseSettings):
    """GitHub API settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or app token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="REST API base URL")
    graphql_url: str | None = Field(default=None, description="GraphQL endpoint; defaults to {api_url}/graphql")


class MergeConfig(BaseSettings):
    """Merge condition and method."""

    model_config = SettingsConfigDict(env_prefix="MERGE_", extra="ignore")

    auto_merge_method: str = Field(default="MERGE", description="MERGE, SQUASH or REBASE")
    required_approvals: int = Field(default=0, ge=0, description="Minimum approving reviews")
    required_status_checks: NameList = Field(default_factory=list, description="Checks that must pass")
    required_labels: NameList = Field(default_factory=list, description="Labels that must be present")

    @field_validator("auto_merge_method", mode="before")
    @classmethod
    def _normalize_merge_method(cls, value: Any) -> str:
        method = str(value or "MERGE").strip().upper()
        if method not in MERGE_METHODS:
            raise ValueError(f"auto_merge_method must be one of {sorted(MERGE_METHODS)}, got {value!r}")
        return method

    @property
    def condition(self) -> Condition:
        """Immutable readiness condition for one run."""
        return Condition(
            required_approvals=self.required_approvals,
            required_status_checks=frozenset(self.required_status_checks),
            required_labels=frozenset(self.required_labels),
        )


class SchedulerConfig(BaseSettings):
    """Polling settings for watch mode."""

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_", extra="ignore")

    interval_seconds: int = Field(default=300, ge=30, description="Seconds between passes")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    bot: BotConfig = Field(default_factory=BotConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config (or action input), env or Docker
        secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")

    def require_token(self) -> str:
        token = self.github_token_resolved
        if not token:
            raise ConfigError("GitHub token is not set (github.token, GITHUB_TOKEN or INPUT_TOKEN)")
        return token

    def require_repository(self) -> str:
        repo = self.bot.repository.strip()
        if "/" not in repo:
            raise ConfigError(f"Repository must be owner/repo (bot.repository or GITHUB_REPOSITORY), got {repo!r}")
        return repo


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        # Simple $VAR
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file, environment and action inputs.

    Secrets: GITHUB_TOKEN or GITHUB_TOKEN_FILE, or INPUT_TOKEN in Actions.
    """
    global _current_env

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    raw: dict[str, Any] = {}
    if path.is_file():
        raw = yaml.safe_load(path.read_text()) or {}
        raw = _substitute_env(raw)

    # Env overrides for nested values (e.g. BOT_REPOSITORY)
    bot_raw = raw.get("bot") or {}
    if _current_env.get("BOT_REPOSITORY"):
        bot_raw = {**bot_raw, "repository": _current_env["BOT_REPOSITORY"]}
    elif not bot_raw.get("repository") and _current_env.get("GITHUB_REPOSITORY"):
        bot_raw = {**bot_raw, "repository": _current_env["GITHUB_REPOSITORY"]}

    github_raw = raw.get("github") or {}
    if _current_env.get("INPUT_TOKEN"):
        github_raw = {**github_raw, "token": _current_env["INPUT_TOKEN"]}

    merge_raw = dict(raw.get("merge") or {})
    for env_key, field_name in ACTION_INPUTS.items():
        value = _current_env.get(env_key, "")
        if value.strip():
            merge_raw[field_name] = value

    return AppConfig(
        bot=BotConfig(**bot_raw),
        github=GitHubConfig(**github_raw),
        merge=MergeConfig(**merge_raw),
        scheduler=SchedulerConfig(**(raw.get("scheduler") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
