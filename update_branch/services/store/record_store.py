"""Record storage in a dashboard issue of the target repository.

One issue per repository, found by the marker on the first line of its body.
The body ends with a ```json block holding RecordBody; the whole body is
rewritten on every update. The record doubles as an advisory lock: a run sets
editing=true before acting and clears it when done. There is no lease, so a
run killed in between leaves the record locked until someone edits it.
"""

import logging
from abc import ABC, abstractmethod

from pydantic import ValidationError

from update_branch.adapters.base import GitPlatformAdapter
from update_branch.models import IssueInfo
from update_branch.services.store.schemas import RecordBody

RECORD_MARKER = "<!-- lcdsmao/update-branch -->"
RECORD_TITLE = "Update Branch Dashboard"
FENCE_OPEN = "```json"
FENCE_CLOSE = "```"

LOG = logging.getLogger("update_branch.services.store.record_store")


def parse_record_body(text: str | None) -> RecordBody:
    """Parse the last ```json block of an issue body.

    Returns an empty RecordBody (editing=False, nothing pending) when the
    block is missing or invalid.
    """
    if not text or FENCE_OPEN not in text:
        return RecordBody()
    raw = text.split(FENCE_OPEN)[-1].split(FENCE_CLOSE)[0]
    try:
        return RecordBody.model_validate_json(raw)
    except ValidationError as e:
        LOG.debug("Unreadable record body, starting fresh: %s", e)
        return RecordBody()


def format_record_body(body: RecordBody) -> str:
    """Render the full issue body for body."""
    return "\n".join(
        [
            RECORD_MARKER,
            "This issue provides [update-branch](https://github.com/lcdsmao/update-branch) status.",
            "",
            "Status:",
            "",
            FENCE_OPEN,
            body.to_json(),
            FENCE_CLOSE,
            "",
        ]
    )


def find_record_issue(adapter: GitPlatformAdapter, repo: str, author: str) -> IssueInfo | None:
    """Find the dashboard issue created by author. Returns None if absent."""
    return adapter.find_created_issue_with_body_prefix(repo, author, RECORD_MARKER)


def create_record_issue(adapter: GitPlatformAdapter, repo: str) -> IssueInfo:
    """Create an empty dashboard issue; the next write fills its body."""
    issue = adapter.create_issue(repo, RECORD_TITLE, "")
    LOG.info("Created record issue #%s in %s", issue.number, repo)
    return issue


def load_record(adapter: GitPlatformAdapter, repo: str, author: str) -> tuple[IssueInfo, RecordBody]:
    """Find or create the dashboard issue and parse its record."""
    issue = find_record_issue(adapter, repo, author)
    if issue is None:
        issue = create_record_issue(adapter, repo)
    return issue, parse_record_body(issue.body)


def write_record_body(adapter: GitPlatformAdapter, repo: str, issue: IssueInfo, body: RecordBody) -> IssueInfo:
    """Overwrite the dashboard issue body with body."""
    updated = adapter.update_issue(repo, issue.number, format_record_body(body))
    LOG.debug("Wrote record to issue #%s: %s", issue.number, body.to_json())
    return updated


class RecordLock(ABC):
    """Single-slot mutex guarding the merge coordinator across runs.

    body holds the record read by the last acquire().
    """

    body: RecordBody

    @abstractmethod
    def acquire(self) -> bool:
        """Take the lock. Returns False if another run holds it."""
        ...

    @abstractmethod
    def release(self, body: RecordBody) -> None:
        """Persist body and free the lock."""
        ...


class IssueRecordLock(RecordLock):
    """RecordLock backed by the editing flag of the dashboard issue."""

    def __init__(self, adapter: GitPlatformAdapter, repo: str, author: str) -> None:
        self._adapter = adapter
        self._repo = repo
        self._author = author
        self._issue: IssueInfo | None = None
        self.body = RecordBody()

    def acquire(self) -> bool:
        issue, body = load_record(self._adapter, self._repo, self._author)
        self._issue = issue
        self.body = body
        if body.editing:
            return False
        write_record_body(self._adapter, self._repo, issue, body.model_copy(update={"editing": True}))
        return True

    def release(self, body: RecordBody) -> None:
        if self._issue is None:
            raise RuntimeError("release() called before acquire()")
        write_record_body(self._adapter, self._repo, self._issue, body.model_copy(update={"editing": False}))
