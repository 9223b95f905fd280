"""One pass: take the record lock, run the merge coordinator, release the lock.

The record is written back on every path once the lock is held, including
failures, so the next pass is not locked out.
"""

import logging
from dataclasses import dataclass

from update_branch.adapters.base import GitPlatformAdapter
from update_branch.adapters.github import GitHubAdapter
from update_branch.config import AppConfig
from update_branch.models import Condition
from update_branch.services.coordinator import MergeCoordinator
from update_branch.services.store import IssueRecordLock, RecordBody, RecordLock

LOG = logging.getLogger("update_branch.runner")


@dataclass
class RunResult:
    """Outcome of a pass. next_body is None when the lock was not acquired."""

    acquired: bool
    next_body: RecordBody | None = None


def _format_condition(condition: Condition) -> str:
    return (
        f"requiredApprovals={condition.required_approvals} "
        f"requiredStatusChecks={sorted(condition.required_status_checks)} "
        f"requiredLabels={sorted(condition.required_labels)}"
    )


def make_adapter(config: AppConfig) -> GitHubAdapter:
    """Build the GitHub adapter from config."""
    return GitHubAdapter(
        token=config.require_token(),
        api_url=config.github.api_url,
        graphql_url=config.github.graphql_url,
    )


def run_with_lock(lock: RecordLock, coordinator: MergeCoordinator) -> RunResult:
    """Run the coordinator while holding lock.

    If the coordinator raises, an empty record is written before the error
    propagates.
    """
    if not lock.acquire():
        LOG.info("Other run is editing the record. Exit.")
        return RunResult(acquired=False)

    current = lock.body
    next_body = RecordBody(editing=False)
    try:
        next_body = coordinator.run(current)
    finally:
        lock.release(next_body)
    return RunResult(acquired=True, next_body=next_body)


def run_once(config: AppConfig, adapter: GitPlatformAdapter | None = None) -> RunResult:
    """Run a single pass against config.bot.repository."""
    repo = config.require_repository()
    condition = config.merge.condition
    LOG.info("Condition: %s", _format_condition(condition))

    if adapter is None:
        adapter = make_adapter(config)
    viewer = adapter.get_viewer_login()
    LOG.debug("Acting as %s on %s", viewer, repo)

    lock = IssueRecordLock(adapter, repo, viewer)
    coordinator = MergeCoordinator(adapter, repo, condition, config.merge.auto_merge_method)
    return run_with_lock(lock, coordinator)
