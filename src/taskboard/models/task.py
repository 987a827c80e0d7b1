"""Task ledger model."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import enum_column, timestamp_column, utcnow


class TaskStatus(str, Enum):
    """Lifecycle status of a task."""

    ACTIVE = "activo"
    INACTIVE = "inactivo"
    COMPLETED = "finalizado"


class TaskPriority(str, Enum):
    LOW = "baja"
    MEDIUM = "media"
    HIGH = "alta"


class ProgressState(str, Enum):
    """How far work on a task has come, reported through progress updates."""

    NOT_STARTED = "inicializado"
    IN_PROGRESS = "en proceso"
    COMPLETED = "finalizado"


class Task(SQLModel, table=True):
    """Persistent task record."""

    __tablename__ = "tasks"
    __table_args__ = (
        sa.CheckConstraint("length(title) > 0", name="ck_tasks_title_length"),
        sa.Index("ix_tasks_status", "status"),
        sa.Index("ix_tasks_assigned_to", "assigned_to"),
    )

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    description: str = Field(
        default="",
        sa_column=sa.Column(sa.Text(), nullable=False, server_default=""),
    )
    status: TaskStatus = Field(
        default=TaskStatus.ACTIVE,
        sa_column=enum_column(TaskStatus, "task_status", TaskStatus.ACTIVE),
    )
    priority: TaskPriority = Field(
        default=TaskPriority.MEDIUM,
        sa_column=enum_column(TaskPriority, "task_priority", TaskPriority.MEDIUM),
    )
    progress_state: ProgressState = Field(
        default=ProgressState.NOT_STARTED,
        sa_column=enum_column(ProgressState, "task_progress_state", ProgressState.NOT_STARTED),
    )
    assigned_to: int | None = Field(
        default=None,
        sa_column=sa.Column(sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
    )
    # No foreign key: deleting a user keeps the tasks they created.
    created_by: int = Field(sa_column=sa.Column(sa.Integer(), nullable=False))
    due_date: date | None = Field(default=None, sa_column=sa.Column(sa.Date(), nullable=True))
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


__all__ = ["ProgressState", "Task", "TaskPriority", "TaskStatus"]
