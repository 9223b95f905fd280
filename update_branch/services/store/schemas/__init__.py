"""Schemas for the persisted record."""

from update_branch.services.store.schemas.record_body import RecordBody

__all__ = ["RecordBody"]
