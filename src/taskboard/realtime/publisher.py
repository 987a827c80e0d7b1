"""Task lifecycle events pushed after successful writes."""

from __future__ import annotations

import logging

from ..schemas import ProgressUpdateRead, TaskDetailRead, TaskRead
from . import events
from .broker import RealtimeBroker

logger = logging.getLogger(__name__)


class TaskEventPublisher:
    """Turns committed task changes into broadcast events.

    Payloads are the same serialised models the HTTP endpoints return, so a
    client can apply an event exactly as it would a response.
    """

    def __init__(self, broker: RealtimeBroker) -> None:
        self._broker = broker

    async def _publish(self, event: str, data: object) -> None:
        logger.info("Broadcasting task event", extra={"event": event})
        await self._broker.broadcast(event, data)

    async def task_created(self, task: TaskRead) -> None:
        await self._publish(events.TASK_CREATED, task.model_dump(mode="json"))

    async def task_updated(self, task: TaskRead) -> None:
        await self._publish(events.TASK_UPDATED, task.model_dump(mode="json"))

    async def task_deleted(self, task_id: int) -> None:
        await self._publish(events.TASK_DELETED, {"id": task_id})

    async def task_assigned(self, task: TaskRead, *, assigned_by_name: str | None) -> None:
        await self._publish(
            events.TASK_ASSIGNED,
            {
                "taskId": task.id,
                "assignedTo": task.assigned_to,
                "assignedByName": assigned_by_name,
                "task": task.model_dump(mode="json"),
            },
        )

    async def task_status_changed(self, task: TaskRead, *, changed_by_name: str | None) -> None:
        await self._publish(
            events.TASK_STATUS_CHANGED,
            {
                "taskId": task.id,
                "status": task.status.value,
                "changedByName": changed_by_name,
                "task": task.model_dump(mode="json"),
            },
        )

    async def update_added(self, update: ProgressUpdateRead, task: TaskDetailRead) -> None:
        await self._publish(
            events.TASK_UPDATE_ADDED,
            {
                "taskId": task.id,
                "update": update.model_dump(mode="json"),
                "task": task.model_dump(mode="json"),
            },
        )


__all__ = ["TaskEventPublisher"]
