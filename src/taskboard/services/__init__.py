"""Domain service layer package."""

from __future__ import annotations

from .auth import AuthService
from .tasks import TaskDetail, TaskService
from .users import UserService

__all__ = ["AuthService", "TaskDetail", "TaskService", "UserService"]
