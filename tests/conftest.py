"""Shared fixtures: an in-memory platform standing in for GitHub."""

from typing import Any, List

import pytest

from update_branch.adapters.base import GitPlatformAdapter, GitPlatformError
from update_branch.models import Condition, IssueInfo, PullRequestInfo


def make_pr(number: int, status: str = "CLEAN", **kwargs: Any) -> PullRequestInfo:
    """PR snapshot with sensible defaults; id is derived from number."""
    kwargs.setdefault("id", f"PR_{number}")
    return PullRequestInfo(number=number, merge_state_status=status, **kwargs)


class FakePlatform(GitPlatformAdapter):
    """Records every mutating call in self.calls."""

    def __init__(self, viewer: str = "bot") -> None:
        self.viewer = viewer
        self.prs: List[PullRequestInfo] = []
        self.issues: List[IssueInfo] = []
        self.calls: List[tuple] = []
        self.body_writes: List[str] = []
        self.fail_on: set[str] = set()

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise GitPlatformError(f"500: {name} failed")

    def get_viewer_login(self) -> str:
        return self.viewer

    def list_available_pull_requests(self, repo: str) -> List[PullRequestInfo]:
        self._maybe_fail("list_available_pull_requests")
        return list(self.prs)

    def get_pull_request(self, repo: str, number: int) -> PullRequestInfo:
        self._maybe_fail("get_pull_request")
        for pr in self.prs:
            if pr.number == number:
                return pr
        raise GitPlatformError(f"Not found: pull request #{number}")

    def merge_pull_request(self, pr_id: str, merge_method: str) -> None:
        self._maybe_fail("merge_pull_request")
        self.calls.append(("merge", pr_id, merge_method))

    def update_branch(self, repo: str, number: int) -> None:
        self._maybe_fail("update_branch")
        self.calls.append(("update_branch", number))

    def enable_pull_request_auto_merge(self, pr_id: str, merge_method: str) -> None:
        self._maybe_fail("enable_pull_request_auto_merge")
        self.calls.append(("enable_auto_merge", pr_id, merge_method))

    def find_created_issue_with_body_prefix(self, repo: str, author: str, prefix: str) -> IssueInfo | None:
        for issue in self.issues:
            if issue.author == author and issue.body.lstrip().startswith(prefix):
                return issue
        return None

    def create_issue(self, repo: str, title: str, body: str = "") -> IssueInfo:
        issue = IssueInfo(number=len(self.issues) + 100, title=title, body=body, author=self.viewer)
        self.issues.append(issue)
        self.calls.append(("create_issue", title))
        return issue

    def update_issue(self, repo: str, issue_number: int, body: str) -> IssueInfo:
        for i, issue in enumerate(self.issues):
            if issue.number == issue_number:
                updated = issue.model_copy(update={"body": body})
                self.issues[i] = updated
                self.body_writes.append(body)
                return updated
        raise GitPlatformError(f"Not found: issue #{issue_number}")


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def condition() -> Condition:
    return Condition(
        required_approvals=1,
        required_status_checks=frozenset({"build"}),
        required_labels=frozenset(),
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host CI variables out of config loading."""
    for key in (
        "GITHUB_TOKEN",
        "GITHUB_TOKEN_FILE",
        "GITHUB_REPOSITORY",
        "GITHUB_API_URL",
        "GITHUB_GRAPHQL_URL",
        "GITHUB_ACTIONS",
        "BOT_REPOSITORY",
        "INPUT_TOKEN",
        "INPUT_AUTOMERGEMETHOD",
        "INPUT_REQUIREDAPPROVALS",
        "INPUT_REQUIREDSTATUSCHECKS",
        "INPUT_REQUIREDLABELS",
        "MERGE_AUTO_MERGE_METHOD",
        "MERGE_REQUIRED_APPROVALS",
        "MERGE_REQUIRED_STATUS_CHECKS",
        "MERGE_REQUIRED_LABELS",
        "LOGGING_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("update_branch.config._current_env", {})
