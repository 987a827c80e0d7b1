"""Schemas for the name-only login flow."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .user import UserPublic


class LoginRequest(BaseModel):
    model_config = ConfigDict(json_schema_extra={"example": {"name": "admin"}})

    name: str | None = Field(default=None, max_length=255)


class LoginResponse(BaseModel):
    message: str = "Login successful"
    user: UserPublic


class SessionStatus(BaseModel):
    """Whether the caller holds a session, and who it belongs to."""

    authenticated: bool
    user: UserPublic | None = None


class CurrentUserResponse(BaseModel):
    user: UserPublic


__all__ = ["CurrentUserResponse", "LoginRequest", "LoginResponse", "SessionStatus"]
