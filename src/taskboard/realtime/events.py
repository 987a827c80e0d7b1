"""Event names and message envelopes for the websocket channel."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# Server -> client
TASK_CREATED = "task:created"
TASK_UPDATED = "task:updated"
TASK_DELETED = "task:deleted"
TASK_ASSIGNED = "task:assigned"
TASK_STATUS_CHANGED = "task:status_changed"
TASK_UPDATE_ADDED = "task:update_added"
USERS_UPDATED = "users:updated"
VIEWER_JOINED = "task:viewer_joined"
VIEWER_LEFT = "task:viewer_left"
NOTIFICATION_READ_CONFIRM = "notification:read_confirm"
ERROR = "error"

# Client -> server
USER_JOIN = "user:join"
TASK_VIEWING = "task:viewing"
TASK_STOP_VIEWING = "task:stop_viewing"
NOTIFICATION_READ = "notification:read"


class ClientMessage(BaseModel):
    """Frame accepted from websocket clients."""

    event: str = Field(min_length=1)
    data: Any = None


class ServerEvent(BaseModel):
    """Frame pushed to websocket clients."""

    event: str
    data: Any = None


def parse_task_id(data: Any) -> int | None:
    """Accept ``5``, ``"5"`` or ``{"taskId": 5}`` as a task reference."""

    if isinstance(data, dict):
        data = data.get("taskId", data.get("task_id"))
    if isinstance(data, bool):
        return None
    if isinstance(data, int):
        return data
    if isinstance(data, str) and data.strip().isdigit():
        return int(data.strip())
    return None


__all__ = [
    "ClientMessage",
    "ERROR",
    "NOTIFICATION_READ",
    "NOTIFICATION_READ_CONFIRM",
    "ServerEvent",
    "TASK_ASSIGNED",
    "TASK_CREATED",
    "TASK_DELETED",
    "TASK_STATUS_CHANGED",
    "TASK_STOP_VIEWING",
    "TASK_UPDATED",
    "TASK_UPDATE_ADDED",
    "TASK_VIEWING",
    "USERS_UPDATED",
    "USER_JOIN",
    "VIEWER_JOINED",
    "VIEWER_LEFT",
    "parse_task_id",
]
