"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from typing import List

from update_branch.models import IssueInfo, PullRequestInfo


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    pass


class GitPlatformAdapter(ABC):
    """Abstract interface for the hosting platform (identity, pull requests,
    issues)."""

    @abstractmethod
    def get_viewer_login(self) -> str:
        """Return the login of the identity the token acts as."""
        ...

    @abstractmethod
    def list_available_pull_requests(self, repo: str) -> List[PullRequestInfo]:
        """List open, non-draft pull requests, oldest first."""
        ...

    @abstractmethod
    def get_pull_request(self, repo: str, number: int) -> PullRequestInfo:
        """Fetch a fresh snapshot of one pull request."""
        ...

    @abstractmethod
    def merge_pull_request(self, pr_id: str, merge_method: str) -> None:
        """Merge a pull request now (MERGE, SQUASH or REBASE)."""
        ...

    @abstractmethod
    def update_branch(self, repo: str, number: int) -> None:
        """Merge the base branch into the pull request head."""
        ...

    @abstractmethod
    def enable_pull_request_auto_merge(self, pr_id: str, merge_method: str) -> None:
        """Let the platform merge the pull request once its requirements pass."""
        ...

    @abstractmethod
    def find_created_issue_with_body_prefix(self, repo: str, author: str, prefix: str) -> IssueInfo | None:
        """Return the first issue created by author whose body starts with
        prefix."""
        ...

    @abstractmethod
    def create_issue(self, repo: str, title: str, body: str = "") -> IssueInfo:
        """Create an issue."""
        ...

    @abstractmethod
    def update_issue(self, repo: str, issue_number: int, body: str) -> IssueInfo:
        """Replace the issue body."""
        ...
