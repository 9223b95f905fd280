"""Tests for config loading (YAML, env, GitHub Actions inputs)."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from update_branch.config import AppConfig, ConfigError, MergeConfig, load_config


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.yaml")
    assert config.bot.repository == ""
    assert config.merge.auto_merge_method == "MERGE"
    assert config.merge.required_approvals == 0
    assert config.merge.condition.required_status_checks == frozenset()
    assert config.scheduler.interval_seconds == 300


def test_yaml_values(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
bot:
  repository: acme/widgets
merge:
  auto_merge_method: squash
  required_approvals: 2
  required_status_checks: [build, lint]
  required_labels:
    - automerge
scheduler:
  interval_seconds: 60
logging:
  level: DEBUG
""",
    )
    config = load_config(path)
    assert config.bot.repository == "acme/widgets"
    assert config.merge.auto_merge_method == "SQUASH"
    condition = config.merge.condition
    assert condition.required_approvals == 2
    assert condition.required_status_checks == frozenset({"build", "lint"})
    assert condition.required_labels == frozenset({"automerge"})
    assert config.scheduler.interval_seconds == 60
    assert config.logging.level == "DEBUG"


def test_env_substitution_for_token(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MY_TOKEN", "from-env")
    path = _write(tmp_path, "github:\n  token: ${MY_TOKEN}\n")
    assert load_config(path).github_token_resolved == "from-env"


def test_unresolved_placeholder_falls_back_to_github_token(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _write(tmp_path, "github:\n  token: ${NOT_SET_ANYWHERE}\n")
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
    assert load_config(path).github_token_resolved == "ghp_env"


def test_token_from_secret_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    secret = tmp_path / "token"
    secret.write_text("ghp_file\n", encoding="utf-8")
    monkeypatch.setenv("GITHUB_TOKEN_FILE", str(secret))
    assert load_config(tmp_path / "absent.yaml").github_token_resolved == "ghp_file"


def test_action_inputs_override_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """INPUT_* variables (newline-separated lists) win over the YAML file."""
    path = _write(tmp_path, "merge:\n  required_approvals: 5\n  required_labels: [yaml]\n")
    monkeypatch.setenv("INPUT_TOKEN", "ghs_action")
    monkeypatch.setenv("INPUT_AUTOMERGEMETHOD", "rebase")
    monkeypatch.setenv("INPUT_REQUIREDAPPROVALS", "1")
    monkeypatch.setenv("INPUT_REQUIREDSTATUSCHECKS", "build\n\ntest (3.12)\n")
    monkeypatch.setenv("INPUT_REQUIREDLABELS", "")
    monkeypatch.setenv("GITHUB_REPOSITORY", "acme/widgets")

    config = load_config(path)
    assert config.github_token_resolved == "ghs_action"
    assert config.merge.auto_merge_method == "REBASE"
    assert config.merge.required_approvals == 1
    assert config.merge.required_status_checks == ["build", "test (3.12)"]
    # empty input does not clear the YAML value
    assert config.merge.required_labels == ["yaml"]
    assert config.bot.repository == "acme/widgets"


def test_bot_repository_env_beats_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _write(tmp_path, "bot:\n  repository: yaml/repo\n")
    monkeypatch.setenv("BOT_REPOSITORY", "env/repo")
    monkeypatch.setenv("GITHUB_REPOSITORY", "actions/repo")
    assert load_config(path).bot.repository == "env/repo"


def test_yaml_repository_beats_github_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _write(tmp_path, "bot:\n  repository: yaml/repo\n")
    monkeypatch.setenv("GITHUB_REPOSITORY", "actions/repo")
    assert load_config(path).bot.repository == "yaml/repo"


def test_invalid_merge_method_rejected() -> None:
    with pytest.raises(ValidationError):
        MergeConfig(auto_merge_method="fast-forward")


def test_negative_approvals_rejected() -> None:
    with pytest.raises(ValidationError):
        MergeConfig(required_approvals=-1)


def test_newline_string_split() -> None:
    merge = MergeConfig(required_status_checks="build\n  \nlint", required_labels=None)
    assert merge.required_status_checks == ["build", "lint"]
    assert merge.required_labels == []


def test_require_token_and_repository() -> None:
    config = AppConfig()
    with pytest.raises(ConfigError):
        config.require_token()
    with pytest.raises(ConfigError):
        config.require_repository()
