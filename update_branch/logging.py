"""Logging from config and env, with GitHub Actions output support.

Levels (inclusive):
- ERROR: failed runs only
- WARNING: non-critical issues and ERROR
- INFO: decisions taken by each run, WARNING, and ERROR
- DEBUG: condition details, record writes and all levels above

Configure via config.yaml (logging.level, logging.format) or env (LOGGING_LEVEL, LOGGING_FORMAT).
Inside GitHub Actions the runner already timestamps every line, so records are
written without asctime, and DEBUG/WARNING records become ::debug:: and
::warning:: workflow commands.
"""

import logging

from update_branch.config import LoggingConfig

# Supported levels only (DEBUG, INFO, WARNING, ERROR)
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ACTIONS_FORMAT = "%(name)s: %(message)s"

LOGGER_NAME = "update_branch"


def _resolve_level(level: str) -> int:
    """Map level name to logging constant.

    Falls back to INFO if unknown.
    """
    return LEVELS.get(level.upper().strip(), logging.INFO)


def escape_workflow_data(message: str) -> str:
    """Escape a message for a workflow command (::error::, ::warning:: ...)."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsFormatter(logging.Formatter):
    """Render DEBUG and WARNING records as workflow commands.

    ERROR is left plain: the CLI emits the single ::error:: annotation of a
    failed run itself.
    """

    COMMANDS = {logging.DEBUG: "::debug::", logging.WARNING: "::warning::"}

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        command = self.COMMANDS.get(record.levelno)
        if command is None:
            return text
        return command + escape_workflow_data(text)


class UpdateBranchLogging:
    """Configures logging from LoggingConfig (YAML + env LOGGING_*).

    The root handler carries the formatter; the update_branch logger gets
    the configured level so third-party libraries (urllib3) stay at WARNING
    unless the level is raised explicitly on the root.
    """

    def __init__(self, config: LoggingConfig, github_actions: bool = False) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT
        self._github_actions = github_actions

    def formatter(self) -> logging.Formatter:
        if self._github_actions:
            return ActionsFormatter(ACTIONS_FORMAT)
        return logging.Formatter(self._format)

    def setup(self) -> logging.Logger:
        """Install the handler and return the update_branch logger."""
        handler = logging.StreamHandler()
        handler.setFormatter(self.formatter())
        logging.basicConfig(level=max(self._level, logging.WARNING), handlers=[handler], force=True)
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(self._level)
        return logger
