"""Coordination state stored in the dashboard issue's ```json block."""

from pydantic import BaseModel, Field


class RecordBody(BaseModel):
    """Lock flag and the single pull request in flight."""

    editing: bool = Field(default=False, description="Set while a run holds the record")
    pending_merge_pull_request_number: int | None = Field(
        default=None,
        alias="pendingMergePullRequestNumber",
        description="PR whose branch was updated and waits for auto-merge",
    )

    model_config = {"extra": "ignore", "populate_by_name": True}

    def to_json(self) -> str:
        """Serialize with wire keys; unset pending number is omitted."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)
