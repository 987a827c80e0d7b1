"""Append-only progress notes attached to tasks."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import enum_column, timestamp_column, utcnow
from .task import ProgressState


class ProgressUpdate(SQLModel, table=True):
    __tablename__ = "updates"
    __table_args__ = (
        sa.Index("ix_updates_task_id", "task_id"),
        sa.Index("ix_updates_timestamp", "timestamp"),
    )

    id: int | None = Field(default=None, primary_key=True)
    task_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    # Authors may be deleted later; their notes stay with the task.
    user_id: int = Field(sa_column=sa.Column(sa.Integer(), nullable=False))
    comment: str = Field(
        default="",
        sa_column=sa.Column(sa.Text(), nullable=False, server_default=""),
    )
    progress_state: ProgressState = Field(
        default=ProgressState.NOT_STARTED,
        sa_column=enum_column(ProgressState, "update_progress_state", ProgressState.NOT_STARTED),
    )
    timestamp: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


__all__ = ["ProgressUpdate"]
