"""Git platform adapters."""

from update_branch.adapters.base import GitPlatformAdapter, GitPlatformError
from update_branch.adapters.github import GitHubAdapter

__all__ = ["GitPlatformAdapter", "GitPlatformError", "GitHubAdapter"]
