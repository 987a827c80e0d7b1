"""User-facing schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import UserRole
from ..models.common import ensure_utc


class UserWrite(BaseModel):
    """Body for creating or replacing a user; both fields are checked by the service."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "maria", "role": UserRole.WORKER.value}}
    )

    name: str | None = Field(default=None, max_length=255)
    role: UserRole | None = None


class UserPublic(BaseModel):
    """Identity shown in session and presence payloads."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None = None
    role: UserRole | None = None


class UserRead(UserPublic):
    name: str
    role: UserRole
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _normalise_timezone(cls, value: datetime) -> datetime:
        return ensure_utc(value)


__all__ = ["UserPublic", "UserRead", "UserWrite"]
