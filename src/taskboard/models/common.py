"""Shared column helpers and time utilities."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

import sqlalchemy as sa


def utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """SQLite hands datetimes back naive; they were written as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def enum_column(enum_cls: type[Enum], name: str, default: Enum | None = None, **kwargs) -> sa.Column:
    """Non-native enum column that stores member *values*, guarded by a CHECK."""

    return sa.Column(
        sa.Enum(
            enum_cls,
            name=name,
            native_enum=False,
            create_constraint=True,
            validate_strings=True,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
        server_default=default.value if default is not None else None,
        **kwargs,
    )


def timestamp_column(**kwargs) -> sa.Column:
    return sa.Column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
        **kwargs,
    )


__all__ = ["enum_column", "ensure_utc", "timestamp_column", "utcnow"]
