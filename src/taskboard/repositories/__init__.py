"""Database repositories for encapsulating persistence logic."""

from __future__ import annotations

from .tasks import TaskCounts, TaskFilters, TaskListing, TaskRepository
from .updates import ProgressUpdateListing, ProgressUpdateRepository
from .users import UserRepository

__all__ = [
    "ProgressUpdateListing",
    "ProgressUpdateRepository",
    "TaskCounts",
    "TaskFilters",
    "TaskListing",
    "TaskRepository",
    "UserRepository",
]
