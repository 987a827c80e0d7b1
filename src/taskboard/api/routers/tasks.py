"""Routes for the task ledger. Every successful write is broadcast."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from ...deps import (
    AdminIdentityDependency,
    CurrentIdentityDependency,
    DatabaseSessionDependency,
    PublisherDependency,
)
from ...errors import ValidationError
from ...models import ProgressState, TaskPriority, TaskStatus
from ...repositories import TaskFilters, TaskListing
from ...schemas import (
    MessageResponse,
    ProgressUpdateCreate,
    ProgressUpdateRead,
    TaskAssign,
    TaskCreate,
    TaskDetailRead,
    TaskRead,
    TaskStatistics,
    TaskStatusChange,
    TaskUpdate,
)
from ...services import TaskDetail, TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])

UNASSIGNED_SENTINEL = "null"

StatusQuery = Annotated[
    TaskStatus | None,
    Query(description="Only tasks with this status."),
]
PriorityQuery = Annotated[
    TaskPriority | None,
    Query(description="Only tasks with this priority."),
]
ProgressQuery = Annotated[
    ProgressState | None,
    Query(description="Only tasks in this progress state."),
]
AssigneeQuery = Annotated[
    str | None,
    Query(description="A user id, or the literal `null` for unassigned tasks."),
]


def _parse_assignee_filter(raw: str | None) -> tuple[int | None, bool]:
    if raw is None or raw == "":
        return None, False
    if raw == UNASSIGNED_SENTINEL:
        return None, True
    try:
        return int(raw), False
    except ValueError as exc:
        raise ValidationError("Invalid assigned_to filter", details={"assigned_to": raw}) from exc


def _map_task(listing: TaskListing) -> TaskRead:
    return TaskRead.from_listing(listing)


def _map_detail(detail: TaskDetail) -> TaskDetailRead:
    return TaskDetailRead.model_validate(
        {
            **_map_task(detail.listing).model_dump(),
            "updates": [ProgressUpdateRead.from_listing(update) for update in detail.updates],
        }
    )


@router.get("", response_model=list[TaskRead], summary="List tasks, newest first")
async def list_tasks(
    session: DatabaseSessionDependency,
    _identity: CurrentIdentityDependency,
    status: StatusQuery = None,
    priority: PriorityQuery = None,
    progress_state: ProgressQuery = None,
    assigned_to: AssigneeQuery = None,
) -> list[TaskRead]:
    assignee, unassigned = _parse_assignee_filter(assigned_to)
    filters = TaskFilters(
        status=status,
        priority=priority,
        progress_state=progress_state,
        assigned_to=assignee,
        unassigned=unassigned,
    )
    return [_map_task(listing) for listing in await TaskService(session).list(filters)]


@router.get("/stats/overview", response_model=TaskStatistics, summary="Task counters")
async def read_statistics(
    session: DatabaseSessionDependency,
    _identity: CurrentIdentityDependency,
) -> TaskStatistics:
    return TaskStatistics.from_counts(await TaskService(session).stats())


@router.get("/{task_id}", response_model=TaskDetailRead, summary="Retrieve a task with its updates")
async def get_task(
    task_id: int,
    session: DatabaseSessionDependency,
    _identity: CurrentIdentityDependency,
) -> TaskDetailRead:
    return _map_detail(await TaskService(session).get_by_id(task_id))


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
)
async def create_task(
    payload: TaskCreate,
    session: DatabaseSessionDependency,
    identity: CurrentIdentityDependency,
    publisher: PublisherDependency,
) -> TaskRead:
    listing = await TaskService(session).create(
        created_by=identity.user_id,
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        assigned_to=payload.assigned_to,
        due_date=payload.due_date,
    )
    task = _map_task(listing)
    await publisher.task_created(task)
    return task


@router.put("/{task_id}", response_model=TaskRead, summary="Partially update a task")
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    session: DatabaseSessionDependency,
    identity: CurrentIdentityDependency,
    publisher: PublisherDependency,
) -> TaskRead:
    listing = await TaskService(session).update(task_id, payload.changes(), updated_by=identity.user_id)
    task = _map_task(listing)
    await publisher.task_updated(task)
    return task


@router.delete("/{task_id}", response_model=MessageResponse, summary="Delete a task (admin)")
async def delete_task(
    task_id: int,
    session: DatabaseSessionDependency,
    _admin: AdminIdentityDependency,
    publisher: PublisherDependency,
) -> MessageResponse:
    await TaskService(session).delete(task_id)
    await publisher.task_deleted(task_id)
    return MessageResponse(message="Task deleted successfully")


@router.post(
    "/{task_id}/updates",
    response_model=ProgressUpdateRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add a progress update",
)
async def add_progress_update(
    task_id: int,
    payload: ProgressUpdateCreate,
    session: DatabaseSessionDependency,
    identity: CurrentIdentityDependency,
    publisher: PublisherDependency,
) -> ProgressUpdateRead:
    service = TaskService(session)
    listing = await service.add_update(
        task_id,
        author_id=identity.user_id,
        comment=payload.comment,
        progress_state=payload.progress_state,
    )
    update = ProgressUpdateRead.from_listing(listing)
    detail = _map_detail(await service.get_by_id(task_id))
    await publisher.update_added(update, detail)
    return update


@router.post("/{task_id}/assign", response_model=TaskRead, summary="Assign or unassign a task")
async def assign_task(
    task_id: int,
    payload: TaskAssign,
    session: DatabaseSessionDependency,
    identity: CurrentIdentityDependency,
    publisher: PublisherDependency,
) -> TaskRead:
    listing = await TaskService(session).assign(
        task_id,
        payload.assigned_to,
        assigned_by=identity.user_id,
    )
    task = _map_task(listing)
    await publisher.task_assigned(task, assigned_by_name=identity.name)
    return task


@router.patch("/{task_id}/status", response_model=TaskRead, summary="Change a task's status")
async def change_task_status(
    task_id: int,
    payload: TaskStatusChange,
    session: DatabaseSessionDependency,
    identity: CurrentIdentityDependency,
    publisher: PublisherDependency,
) -> TaskRead:
    listing = await TaskService(session).change_status(
        task_id,
        payload.status,
        changed_by=identity.user_id,
    )
    task = _map_task(listing)
    await publisher.task_status_changed(task, changed_by_name=identity.name)
    return task
