"""Progress update schemas."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import ProgressState
from ..models.common import ensure_utc

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..repositories import ProgressUpdateListing


class ProgressUpdateCreate(BaseModel):
    """Body for a new progress note; at least one field must carry a value."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "comment": "Backend endpoints merged, starting on the UI.",
                "progress_state": ProgressState.IN_PROGRESS.value,
            }
        }
    )

    comment: str | None = None
    progress_state: ProgressState | None = None


class ProgressUpdateRead(BaseModel):
    id: int
    task_id: int
    user_id: int
    user_name: str | None = None
    comment: str = Field(default="")
    progress_state: ProgressState
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def _normalise_timezone(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @classmethod
    def from_listing(cls, listing: ProgressUpdateListing) -> "ProgressUpdateRead":
        return cls.model_validate({**listing.update.model_dump(), "user_name": listing.user_name})


__all__ = ["ProgressUpdateCreate", "ProgressUpdateRead"]
