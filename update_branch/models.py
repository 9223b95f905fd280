"""Data models for pull requests, issues and the merge condition (Pydantic)."""

from pydantic import BaseModel, ConfigDict, Field

CLEAN = "CLEAN"
UNSTABLE = "UNSTABLE"
BEHIND = "BEHIND"
BLOCKED = "BLOCKED"
UNKNOWN = "UNKNOWN"

# Mergeable right now (UNSTABLE too: required checks are verified by the condition)
MERGEABLE_STATES = frozenset({CLEAN, UNSTABLE})
# GitHub is still computing or waiting on something outside our control
WAITING_STATES = frozenset({BLOCKED, UNKNOWN})


class Condition(BaseModel):
    """Readiness thresholds a pull request must meet before the bot acts on it."""

    model_config = ConfigDict(frozen=True)

    required_approvals: int = Field(default=0, ge=0, description="Minimum approving reviews")
    required_status_checks: frozenset[str] = Field(
        default_factory=frozenset,
        description="Check run / status context names that must have passed",
    )
    required_labels: frozenset[str] = Field(default_factory=frozenset, description="Labels that must be present")


class PullRequestInfo(BaseModel):
    """Snapshot of a pull request at query time."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="GraphQL node id, used for mutations")
    number: int
    title: str = ""
    state: str = "OPEN"
    merge_state_status: str = Field(
        default=UNKNOWN,
        description="CLEAN, UNSTABLE, BEHIND, BLOCKED, UNKNOWN; other values passed through",
    )
    approval_count: int = 0
    passed_status_check_names: frozenset[str] = Field(default_factory=frozenset)
    label_names: frozenset[str] = Field(default_factory=frozenset)


class IssueInfo(BaseModel):
    """Git hosting platform issue (the record document lives in one)."""

    number: int
    title: str = ""
    body: str = ""
    author: str = ""
    state: str = "open"
