"""Tests for update_branch.logging (levels, Actions workflow-command output)."""

import logging

import pytest

from update_branch.config import LoggingConfig
from update_branch.logging import (
    ACTIONS_FORMAT,
    LOGGER_NAME,
    ActionsFormatter,
    UpdateBranchLogging,
    _resolve_level,
    escape_workflow_data,
)


def _record(level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord("update_branch.runner", level, __file__, 1, msg, None, None)


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    ours = logging.getLogger(LOGGER_NAME)
    saved = (root.level, list(root.handlers), ours.level)
    yield
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]
    ours.setLevel(saved[2])


def test_resolve_level_normalizes_and_falls_back() -> None:
    assert _resolve_level(" debug ") == logging.DEBUG
    assert _resolve_level("ERROR") == logging.ERROR
    assert _resolve_level("TRACE") == logging.INFO


def test_escape_workflow_data() -> None:
    """Percent, CR and LF are escaped so multi-line messages stay in one command."""
    assert escape_workflow_data("100% done\r\nnext line") == "100%25 done%0D%0Anext line"


class TestActionsFormatter:
    """DEBUG/WARNING become workflow commands, INFO/ERROR stay plain."""

    def test_warning_becomes_command(self) -> None:
        text = ActionsFormatter(ACTIONS_FORMAT).format(_record(logging.WARNING, "two\nlines"))
        assert text == "::warning::update_branch.runner: two%0Alines"

    def test_debug_becomes_command(self) -> None:
        text = ActionsFormatter(ACTIONS_FORMAT).format(_record(logging.DEBUG, "detail"))
        assert text.startswith("::debug::")

    def test_info_and_error_plain(self) -> None:
        formatter = ActionsFormatter(ACTIONS_FORMAT)
        assert formatter.format(_record(logging.INFO, "Merge PR #2.")) == "update_branch.runner: Merge PR #2."
        assert not formatter.format(_record(logging.ERROR, "boom")).startswith("::")


class TestUpdateBranchLogging:
    """setup() installs one handler and levels the update_branch logger."""

    def test_setup_levels_package_logger(self, restore_logging) -> None:
        logger = UpdateBranchLogging(LoggingConfig(level="DEBUG")).setup()
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_plain_formatter_outside_actions(self, restore_logging) -> None:
        UpdateBranchLogging(LoggingConfig(format="%(levelname)s|%(message)s")).setup()
        handler = logging.getLogger().handlers[0]
        assert not isinstance(handler.formatter, ActionsFormatter)
        assert handler.formatter.format(_record(logging.INFO, "hi")) == "INFO|hi"

    def test_actions_formatter_inside_actions(self, restore_logging) -> None:
        UpdateBranchLogging(LoggingConfig(), github_actions=True).setup()
        assert isinstance(logging.getLogger().handlers[0].formatter, ActionsFormatter)
