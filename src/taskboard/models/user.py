"""User directory model."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import enum_column, timestamp_column, utcnow


class UserRole(str, Enum):
    """Roles a user can hold; values are the stored and wire form."""

    ADMIN = "admin"
    WORKER = "trabajador"


class User(SQLModel, table=True):
    """A person who can log in by name."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False, unique=True),
    )
    role: UserRole = Field(sa_column=enum_column(UserRole, "user_role"))
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


__all__ = ["User", "UserRole"]
