"""Record storage in the dashboard issue (lock + pending merge)."""

from update_branch.services.store.record_store import (
    RECORD_MARKER,
    RECORD_TITLE,
    IssueRecordLock,
    RecordLock,
    create_record_issue,
    find_record_issue,
    format_record_body,
    load_record,
    parse_record_body,
    write_record_body,
)
from update_branch.services.store.schemas import RecordBody

__all__ = [
    "RECORD_MARKER",
    "RECORD_TITLE",
    "IssueRecordLock",
    "RecordBody",
    "RecordLock",
    "create_record_issue",
    "find_record_issue",
    "format_record_body",
    "load_record",
    "parse_record_body",
    "write_record_body",
]
