"""Task ledger: validation and persistence of tasks and progress updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Mapping, TypeVar

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models import ProgressState, ProgressUpdate, Task, TaskPriority, TaskStatus
from ..models.common import utcnow
from ..repositories import (
    ProgressUpdateListing,
    ProgressUpdateRepository,
    TaskCounts,
    TaskFilters,
    TaskListing,
    TaskRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

EnumType = TypeVar("EnumType", bound=Enum)

_UPDATABLE_FIELDS = frozenset(
    {"title", "description", "status", "priority", "progress_state", "assigned_to", "due_date"}
)
# Fields that may be sent as an explicit null to clear them.
_NULLABLE_FIELDS = frozenset({"description", "assigned_to", "due_date"})


def coerce_enum(enum_cls: type[EnumType], value: EnumType | str, field_name: str) -> EnumType:
    """Return ``value`` as a member of ``enum_cls`` or raise ``ValidationError``."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValidationError(
            f"Invalid {field_name.replace('_', ' ')}",
            details={"field": field_name, "allowed": [member.value for member in enum_cls]},
        ) from exc


def _coerce_due_date(value: date | str | None) -> date | None:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError("Invalid due date", details={"field": "due_date"}) from exc


def _require_title(title: str | None) -> str:
    """Reject blank titles; a valid title is stored exactly as sent."""
    if title is None or not title.strip():
        raise ValidationError("Title is required")
    return title


@dataclass(slots=True)
class TaskDetail:
    """A task with its joined names and its progress history, newest first."""

    listing: TaskListing
    updates: list[ProgressUpdateListing] = field(default_factory=list)


class TaskService:
    """High-level business orchestration for ``Task`` entities."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = TaskRepository(session)
        self._updates = ProgressUpdateRepository(session)
        self._users = UserRepository(session)

    @property
    def repository(self) -> TaskRepository:
        return self._repository

    async def _ensure_assignee(self, user_id: int | None) -> None:
        if user_id is not None and await self._users.get(user_id) is None:
            raise ValidationError("Assigned user does not exist", details={"assigned_to": user_id})

    async def _require_task(self, task_id: int) -> Task:
        task = await self._repository.get(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def _reload(self, task: Task) -> TaskListing:
        await self._repository.refresh(task)
        listing = await self._repository.get_listing(task.id)
        if listing is None:
            raise NotFoundError("Task not found")
        return listing

    async def list(self, filters: TaskFilters | None = None) -> list[TaskListing]:
        return await self._repository.list_filtered(filters or TaskFilters())

    async def get_listing(self, task_id: int) -> TaskListing:
        listing = await self._repository.get_listing(task_id)
        if listing is None:
            raise NotFoundError("Task not found")
        return listing

    async def get_by_id(self, task_id: int) -> TaskDetail:
        listing = await self.get_listing(task_id)
        updates = await self._updates.list_for_task(task_id)
        return TaskDetail(listing=listing, updates=updates)

    async def create(
        self,
        *,
        created_by: int,
        title: str | None,
        description: str | None = None,
        priority: TaskPriority | str | None = None,
        assigned_to: int | None = None,
        due_date: date | str | None = None,
    ) -> TaskListing:
        """Create a task owned by ``created_by``."""
        checked_title = _require_title(title)
        parsed_priority = (
            TaskPriority.MEDIUM if priority is None else coerce_enum(TaskPriority, priority, "priority")
        )
        await self._ensure_assignee(assigned_to)

        now = utcnow()
        task = Task(
            title=checked_title,
            description=description or "",
            priority=parsed_priority,
            assigned_to=assigned_to,
            created_by=created_by,
            due_date=_coerce_due_date(due_date),
            created_at=now,
            updated_at=now,
        )
        await self._repository.add(task)
        await self._session.commit()
        logger.info("Task created", extra={"task_id": task.id, "created_by": created_by})
        return await self._reload(task)

    async def _resolve_changes(self, changes: Mapping[str, Any]) -> dict[str, Any]:
        """Validate every requested change before any of them touches the task."""
        resolved: dict[str, Any] = {}
        for name, value in changes.items():
            if value is None and name not in _NULLABLE_FIELDS:
                raise ValidationError(f"{name.replace('_', ' ').capitalize()} cannot be null")
            if name == "title":
                resolved[name] = _require_title(value)
            elif name == "description":
                resolved[name] = value or ""
            elif name == "status":
                resolved[name] = coerce_enum(TaskStatus, value, name)
            elif name == "priority":
                resolved[name] = coerce_enum(TaskPriority, value, name)
            elif name == "progress_state":
                resolved[name] = coerce_enum(ProgressState, value, name)
            elif name == "assigned_to":
                await self._ensure_assignee(value)
                resolved[name] = value
            elif name == "due_date":
                resolved[name] = _coerce_due_date(value)
        return resolved

    async def update(self, task_id: int, changes: Mapping[str, Any], *, updated_by: int) -> TaskListing:
        """Apply a partial update.

        Only keys present in ``changes`` are touched; an explicit ``None``
        clears the assignee or due date and resets the description.
        """
        task = await self._require_task(task_id)
        present = {name: value for name, value in changes.items() if name in _UPDATABLE_FIELDS}
        if not present:
            raise ValidationError("No fields to update")

        for name, value in (await self._resolve_changes(present)).items():
            setattr(task, name, value)
        task.updated_at = utcnow()
        await self._session.commit()
        logger.info(
            "Task updated",
            extra={"task_id": task_id, "updated_by": updated_by, "fields": sorted(present)},
        )
        return await self._reload(task)

    async def assign(self, task_id: int, assigned_to: int | None, *, assigned_by: int) -> TaskListing:
        """Point the task at another user, or unassign it with ``None``."""
        await self._ensure_assignee(assigned_to)
        return await self.update(task_id, {"assigned_to": assigned_to}, updated_by=assigned_by)

    async def change_status(self, task_id: int, status: TaskStatus | str, *, changed_by: int) -> TaskListing:
        parsed = coerce_enum(TaskStatus, status, "status")
        return await self.update(task_id, {"status": parsed}, updated_by=changed_by)

    async def delete(self, task_id: int) -> None:
        removed = await self._repository.delete_by_id(task_id)
        if removed == 0:
            raise NotFoundError("Task not found")
        await self._session.commit()
        logger.info("Task deleted", extra={"task_id": task_id})

    async def add_update(
        self,
        task_id: int,
        *,
        author_id: int,
        comment: str | None = None,
        progress_state: ProgressState | str | None = None,
    ) -> ProgressUpdateListing:
        """Record a progress note and, when a state is given, sync it onto the task.

        The note and the task sync are committed separately; a failure in the
        second step leaves the note in place.
        """
        if not comment and progress_state is None:
            raise ValidationError("Comment or progress state is required")
        parsed_state = (
            None if progress_state is None else coerce_enum(ProgressState, progress_state, "progress_state")
        )
        task = await self._require_task(task_id)

        update = ProgressUpdate(
            task_id=task_id,
            user_id=author_id,
            comment=comment or "",
            progress_state=parsed_state or ProgressState.NOT_STARTED,
            timestamp=utcnow(),
        )
        await self._updates.add(update)
        await self._session.commit()

        if parsed_state is not None:
            task.progress_state = parsed_state
            task.updated_at = utcnow()
            await self._session.commit()

        logger.info(
            "Progress update added",
            extra={"task_id": task_id, "update_id": update.id, "author_id": author_id},
        )
        listing = await self._updates.get_listing(update.id)
        if listing is None:
            raise NotFoundError("Task update not found")
        return listing

    async def stats(self) -> TaskCounts:
        return await self._repository.counts()


__all__ = ["TaskDetail", "TaskService", "coerce_enum"]
