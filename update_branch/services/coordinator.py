"""Merge coordinator: pick at most one pull request per run and act on it.

Updating a branch and letting auto-merge fire happens asynchronously, so the
pull request whose branch was updated is remembered in the record and checked
first on the next run. Priority:

1. pending PR still ready and BLOCKED/UNKNOWN: wait for it
2. pending PR still ready and BEHIND: enable auto-merge, update branch again
3. first ready PR that is CLEAN/UNSTABLE: merge it
4. first ready PR that is BEHIND: update branch, enable auto-merge, remember it
5. nothing to do

The next record is always computed from scratch; a pending PR that is no
longer ready simply does not appear in it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from update_branch.adapters.base import GitPlatformAdapter
from update_branch.models import BEHIND, MERGEABLE_STATES, WAITING_STATES, Condition, PullRequestInfo
from update_branch.services.condition import describe_unmet, is_pending_merge_pr, is_status_check_pass_pr
from update_branch.services.store.schemas import RecordBody

LOG = logging.getLogger("update_branch.services.coordinator")


class Action(str, Enum):
    WAIT = "wait"
    UPDATE_BRANCH = "update_branch"
    MERGE = "merge"
    NONE = "none"


class Step(str, Enum):
    MERGE = "merge"
    UPDATE_BRANCH = "update_branch"
    ENABLE_AUTO_MERGE = "enable_auto_merge"


@dataclass(frozen=True)
class MergePlan:
    """What one run decided: the action, its target, the calls to make and the
    record to persist afterwards."""

    action: Action
    next_body: RecordBody
    pull_request: PullRequestInfo | None = None
    steps: tuple[Step, ...] = ()


def _resume_pending(record: RecordBody, condition: Condition, pending_pr: PullRequestInfo) -> MergePlan | None:
    number = pending_pr.number
    if is_pending_merge_pr(pending_pr, condition):
        if pending_pr.merge_state_status in WAITING_STATES:
            LOG.info("Wait PR #%s to be merged.", number)
            return MergePlan(
                action=Action.WAIT,
                next_body=record.model_copy(update={"editing": False}),
                pull_request=pending_pr,
            )
        if pending_pr.merge_state_status == BEHIND:
            LOG.info("Update branch and wait PR #%s to be merged.", number)
            return MergePlan(
                action=Action.UPDATE_BRANCH,
                next_body=record.model_copy(update={"editing": False}),
                pull_request=pending_pr,
                steps=(Step.ENABLE_AUTO_MERGE, Step.UPDATE_BRANCH),
            )
    else:
        LOG.debug("Pending PR #%s no longer ready: %s", number, "; ".join(describe_unmet(pending_pr, condition)))
    LOG.info(
        "Pending merge PR #%s can not be merged (%s). Try to find other PR that needs update branch.",
        number,
        pending_pr.merge_state_status,
    )
    return None


def plan_merge(
    record: RecordBody,
    condition: Condition,
    available_prs: Sequence[PullRequestInfo],
    pending_pr: PullRequestInfo | None = None,
) -> MergePlan:
    """Decide the single action for this run. Pure: no platform calls."""
    if pending_pr is not None:
        plan = _resume_pending(record, condition, pending_pr)
        if plan is not None:
            return plan

    pass_prs = [pr for pr in available_prs if is_status_check_pass_pr(pr, condition)]
    LOG.debug("%s of %s open PR(s) satisfy the condition", len(pass_prs), len(available_prs))

    clean_pr = next((pr for pr in pass_prs if pr.merge_state_status in MERGEABLE_STATES), None)
    if clean_pr is not None:
        LOG.info("Merge PR #%s.", clean_pr.number)
        return MergePlan(
            action=Action.MERGE,
            next_body=RecordBody(editing=False),
            pull_request=clean_pr,
            steps=(Step.MERGE,),
        )

    behind_pr = next((pr for pr in pass_prs if pr.merge_state_status == BEHIND), None)
    if behind_pr is not None:
        LOG.info("Found PR #%s can be merged. Try to update branch and enable auto merge.", behind_pr.number)
        return MergePlan(
            action=Action.UPDATE_BRANCH,
            next_body=RecordBody(editing=False, pending_merge_pull_request_number=behind_pr.number),
            pull_request=behind_pr,
            steps=(Step.UPDATE_BRANCH, Step.ENABLE_AUTO_MERGE),
        )

    LOG.info("Found no PR that needs update branch.")
    return MergePlan(action=Action.NONE, next_body=RecordBody(editing=False))


class MergeCoordinator:
    """Fetches snapshots, plans with plan_merge and executes the plan."""

    def __init__(
        self,
        adapter: GitPlatformAdapter,
        repo: str,
        condition: Condition,
        merge_method: str = "MERGE",
    ) -> None:
        self._adapter = adapter
        self._repo = repo
        self._condition = condition
        self._merge_method = merge_method

    def run(self, record: RecordBody) -> RecordBody:
        """Run one transition and return the record to persist."""
        # List first so the pending PR snapshot is at least as fresh as the list
        available_prs = self._adapter.list_available_pull_requests(self._repo)
        pending_pr = None
        if record.pending_merge_pull_request_number is not None:
            pending_pr = self._adapter.get_pull_request(self._repo, record.pending_merge_pull_request_number)
        plan = plan_merge(record, self._condition, available_prs, pending_pr)
        self.execute(plan)
        return plan.next_body

    def execute(self, plan: MergePlan) -> None:
        """Issue the platform calls of plan, in order."""
        pr = plan.pull_request
        for step in plan.steps:
            if pr is None:
                raise ValueError(f"Step {step.value} needs a pull request")
            if step is Step.MERGE:
                self._adapter.merge_pull_request(pr.id, self._merge_method)
            elif step is Step.UPDATE_BRANCH:
                self._adapter.update_branch(self._repo, pr.number)
            elif step is Step.ENABLE_AUTO_MERGE:
                self._adapter.enable_pull_request_auto_merge(pr.id, self._merge_method)
