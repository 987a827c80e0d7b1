"""Task-related Pydantic schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import ProgressState, TaskPriority, TaskStatus
from ..models.common import ensure_utc
from .progress import ProgressUpdateRead

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..repositories import TaskCounts, TaskListing

TASK_READ_EXAMPLE = {
    "id": 7,
    "title": "Prepare quarterly inventory",
    "description": "Count stock in both warehouses.",
    "status": TaskStatus.ACTIVE.value,
    "priority": TaskPriority.HIGH.value,
    "progress_state": ProgressState.IN_PROGRESS.value,
    "assigned_to": 3,
    "assigned_name": "maria",
    "created_by": 1,
    "creator_name": "admin",
    "due_date": "2024-07-01",
    "created_at": "2024-06-10T09:00:00Z",
    "updated_at": "2024-06-12T16:45:00Z",
}


class TaskCreate(BaseModel):
    """Payload for creating a new task."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Prepare quarterly inventory",
                "description": "Count stock in both warehouses.",
                "priority": TaskPriority.HIGH.value,
                "assigned_to": 3,
                "due_date": "2024-07-01",
            }
        }
    )

    title: str = Field(max_length=255)
    description: str | None = None
    priority: TaskPriority | None = None
    assigned_to: int | None = None
    due_date: date | None = None


class TaskUpdate(BaseModel):
    """Partial update; only the keys present in the body are applied.

    ``null`` clears ``assigned_to`` or ``due_date`` and empties the
    description.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"status": TaskStatus.INACTIVE.value, "assigned_to": None}
        }
    )

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    progress_state: ProgressState | None = None
    assigned_to: int | None = None
    due_date: date | None = None

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True)


class TaskAssign(BaseModel):
    assigned_to: int | None = None


class TaskStatusChange(BaseModel):
    status: TaskStatus


class TaskRead(BaseModel):
    """Public representation of a task with the creator and assignee names."""

    model_config = ConfigDict(json_schema_extra={"example": TASK_READ_EXAMPLE})

    id: int
    title: str
    description: str = ""
    status: TaskStatus
    priority: TaskPriority
    progress_state: ProgressState
    assigned_to: int | None = None
    assigned_name: str | None = None
    created_by: int
    creator_name: str | None = None
    due_date: date | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _normalise_timezone(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @classmethod
    def from_listing(cls, listing: TaskListing) -> "TaskRead":
        return cls.model_validate(
            {
                **listing.task.model_dump(),
                "creator_name": listing.creator_name,
                "assigned_name": listing.assigned_name,
            }
        )


class TaskDetailRead(TaskRead):
    """A task plus its progress history, newest first."""

    updates: list[ProgressUpdateRead] = Field(default_factory=list)


class TaskStatistics(BaseModel):
    """Dashboard counters."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"total": 12, "active": 7, "inactive": 2, "completed": 3, "unassigned": 4}
        }
    )

    total: int = Field(ge=0)
    active: int = Field(ge=0)
    inactive: int = Field(ge=0)
    completed: int = Field(ge=0)
    unassigned: int = Field(ge=0)

    @classmethod
    def from_counts(cls, counts: TaskCounts) -> "TaskStatistics":
        return cls(
            total=counts.total,
            active=counts.active,
            inactive=counts.inactive,
            completed=counts.completed,
            unassigned=counts.unassigned,
        )


__all__ = [
    "TaskAssign",
    "TaskCreate",
    "TaskDetailRead",
    "TaskRead",
    "TaskStatistics",
    "TaskStatusChange",
    "TaskUpdate",
]
