"""Scheduler: run a pass every interval when no external cron triggers the bot."""

import logging
import time

from update_branch.adapters.base import GitPlatformAdapter
from update_branch.config import AppConfig
from update_branch.runner import make_adapter, run_once

LOG = logging.getLogger("update_branch.scheduler")


def run_scheduler_loop(
    config: AppConfig,
    adapter: GitPlatformAdapter | None = None,
    interval_seconds: int | None = None,
) -> None:
    """Loop forever: one pass, then sleep. A failed pass is logged and the
    loop continues."""
    interval = interval_seconds or config.scheduler.interval_seconds
    if adapter is None:
        adapter = make_adapter(config)
    LOG.info("Watching %s every %ss", config.bot.repository, interval)

    while True:
        try:
            run_once(config, adapter=adapter)
        except Exception as e:
            LOG.exception("Scheduler tick error: %s", e)
        time.sleep(interval)
