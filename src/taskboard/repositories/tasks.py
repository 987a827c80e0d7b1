"""Repository for tasks and their joined display names."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import case, delete, func
from sqlalchemy.orm import aliased
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import ProgressState, ProgressUpdate, Task, TaskPriority, TaskStatus, User
from .base import BaseRepository

_Creator = aliased(User, name="creator")
_Assignee = aliased(User, name="assignee")


@dataclass(slots=True)
class TaskFilters:
    """Exact-match filters for task listings.

    ``unassigned`` selects tasks with no assignee and takes precedence over
    ``assigned_to``.
    """

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    progress_state: ProgressState | None = None
    assigned_to: int | None = None
    unassigned: bool = False


@dataclass(slots=True)
class TaskListing:
    task: Task
    creator_name: str | None
    assigned_name: str | None


@dataclass(slots=True)
class TaskCounts:
    total: int
    active: int
    inactive: int
    completed: int
    unassigned: int


def _listing_query():
    return (
        select(Task, _Creator.name, _Assignee.name)
        .join(_Creator, Task.created_by == _Creator.id, isouter=True)
        .join(_Assignee, Task.assigned_to == _Assignee.id, isouter=True)
    )


class TaskRepository(BaseRepository[Task]):
    """Concrete repository encapsulating ``Task`` persistence operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Task)

    async def list_filtered(self, filters: TaskFilters) -> list[TaskListing]:
        """Return tasks matching ``filters``, newest first."""
        statement = _listing_query()
        if filters.status is not None:
            statement = statement.where(Task.status == filters.status)
        if filters.priority is not None:
            statement = statement.where(Task.priority == filters.priority)
        if filters.progress_state is not None:
            statement = statement.where(Task.progress_state == filters.progress_state)
        if filters.unassigned:
            statement = statement.where(Task.assigned_to.is_(None))
        elif filters.assigned_to is not None:
            statement = statement.where(Task.assigned_to == filters.assigned_to)
        statement = statement.order_by(Task.created_at.desc(), Task.id.desc())

        result = await self._execute(statement, context="Error fetching tasks")
        return [TaskListing(task, creator, assignee) for task, creator, assignee in result.all()]

    async def get_listing(self, task_id: int) -> TaskListing | None:
        result = await self._execute(
            _listing_query().where(Task.id == task_id),
            context="Error fetching task",
        )
        row = result.first()
        if row is None:
            return None
        task, creator, assignee = row
        return TaskListing(task, creator, assignee)

    async def delete_by_id(self, task_id: int) -> int:
        """Delete a task together with its progress updates.

        Returns the number of task rows removed.
        """
        await self._execute(
            delete(ProgressUpdate).where(ProgressUpdate.task_id == task_id),
            context="Error deleting task updates",
        )
        result = await self._execute(
            delete(Task).where(Task.id == task_id),
            context="Error deleting task",
        )
        return result.rowcount or 0

    async def counts(self) -> TaskCounts:
        """Compute every dashboard counter in a single aggregate query."""

        def _count_where(condition):
            return func.count(case((condition, 1)))

        result = await self._execute(
            select(
                func.count(Task.id),
                _count_where(Task.status == TaskStatus.ACTIVE),
                _count_where(Task.status == TaskStatus.INACTIVE),
                _count_where(Task.status == TaskStatus.COMPLETED),
                _count_where(Task.assigned_to.is_(None)),
            ),
            context="Error fetching statistics",
        )
        total, active, inactive, completed, unassigned = result.one()
        return TaskCounts(
            total=int(total),
            active=int(active),
            inactive=int(inactive),
            completed=int(completed),
            unassigned=int(unassigned),
        )


__all__ = ["TaskCounts", "TaskFilters", "TaskListing", "TaskRepository"]
