"""update-branch entry point.

Two modes: run (a single pass, suited to cron or a GitHub Actions schedule)
and watch (a pass every scheduler.interval_seconds). Usage:
update-branch [run|watch] [--config PATH] [--check].
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import yaml

from update_branch.config import load_config
from update_branch.logging import LOGGER_NAME, UpdateBranchLogging, escape_workflow_data

SUBCOMMANDS = ("run", "watch")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI with optional subcommand (run | watch)."""
    argv = argv if argv is not None else sys.argv[1:]
    sub = "run"
    rest = list(argv)
    if argv and not argv[0].startswith("-") and argv[0] in SUBCOMMANDS:
        sub = argv[0]
        rest = argv[1:]

    parser = argparse.ArgumentParser(
        prog="update-branch",
        description="update-branch - keep pull requests up to date and merge them one at a time",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    parsed = parser.parse_args(rest)
    parsed.subcommand = sub
    return parsed


def in_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def report_failure(message: str) -> None:
    """Emit a GitHub Actions error annotation when running inside Actions."""
    if in_github_actions():
        print(f"::error::{escape_workflow_data(message)}")


def main(argv: list[str] | None = None) -> int:
    """Entry point: dispatch to a single pass or the watch loop."""
    args = parse_args(argv)
    log = logging.getLogger(LOGGER_NAME)

    config_path = args.config
    if not config_path.is_file() and config_path == Path("config.yaml"):
        if Path("config.example.yaml").is_file():
            config_path = Path("config.example.yaml")
            logging.basicConfig(level=logging.INFO)
            log.warning("config.yaml not found, using config.example.yaml")

    try:
        config = load_config(config_path)
    except (ValueError, yaml.YAMLError) as e:
        log.error("Invalid config: %s", e)
        report_failure(f"Invalid config: {e}")
        return 1

    if args.check:
        print("Config OK:", config.bot.repository or "(no repository)")
        return 0

    UpdateBranchLogging(config.logging, github_actions=in_github_actions()).setup()

    try:
        if args.subcommand == "watch":
            from update_branch.scheduler import run_scheduler_loop

            run_scheduler_loop(config)
        else:
            from update_branch.runner import run_once

            run_once(config)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        log.exception("Fatal error: %s", e)
        report_failure(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
