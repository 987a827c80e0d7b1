"""SQLModel table definitions."""

from __future__ import annotations

from .progress import ProgressUpdate
from .task import ProgressState, Task, TaskPriority, TaskStatus
from .user import User, UserRole

__all__ = [
    "ProgressState",
    "ProgressUpdate",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "User",
    "UserRole",
]
