"""Pydantic schemas for public interfaces."""

from __future__ import annotations

from .auth import CurrentUserResponse, LoginRequest, LoginResponse, SessionStatus
from .progress import ProgressUpdateCreate, ProgressUpdateRead
from .system import ErrorResponse, HealthCheckResponse, MessageResponse, RootResponse
from .task import (
    TaskAssign,
    TaskCreate,
    TaskDetailRead,
    TaskRead,
    TaskStatistics,
    TaskStatusChange,
    TaskUpdate,
)
from .user import UserPublic, UserRead, UserWrite

__all__ = [
    "CurrentUserResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "ProgressUpdateCreate",
    "ProgressUpdateRead",
    "RootResponse",
    "SessionStatus",
    "TaskAssign",
    "TaskCreate",
    "TaskDetailRead",
    "TaskRead",
    "TaskStatistics",
    "TaskStatusChange",
    "TaskUpdate",
    "UserPublic",
    "UserRead",
    "UserWrite",
]
