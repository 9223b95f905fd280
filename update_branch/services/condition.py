"""Readiness checks of a pull request against the configured condition."""

from typing import List

from update_branch.models import Condition, PullRequestInfo


def is_status_check_pass_pr(pr: PullRequestInfo, condition: Condition) -> bool:
    """Return True if pr has enough approvals, every required check passed and
    every required label is present.

    Empty requirement sets always pass.
    """
    return (
        pr.approval_count >= condition.required_approvals
        and condition.required_status_checks <= pr.passed_status_check_names
        and condition.required_labels <= pr.label_names
    )


def is_pending_merge_pr(pr: PullRequestInfo, condition: Condition) -> bool:
    """Re-validate a pull request selected by an earlier run (approvals may
    have been revoked since)."""
    return is_status_check_pass_pr(pr, condition)


def describe_unmet(pr: PullRequestInfo, condition: Condition) -> List[str]:
    """List why pr does not satisfy condition; empty when it does."""
    reasons: List[str] = []
    if pr.approval_count < condition.required_approvals:
        reasons.append(f"approvals {pr.approval_count}/{condition.required_approvals}")
    missing_checks = condition.required_status_checks - pr.passed_status_check_names
    if missing_checks:
        reasons.append("checks not passed: " + ", ".join(sorted(missing_checks)))
    missing_labels = condition.required_labels - pr.label_names
    if missing_labels:
        reasons.append("labels missing: " + ", ".join(sorted(missing_labels)))
    return reasons
