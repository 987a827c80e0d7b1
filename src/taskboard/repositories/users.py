"""Repository for the user directory."""

from __future__ import annotations

from sqlalchemy import delete, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Task, User, UserRole
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Concrete repository for CRUD operations on ``User`` entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def list_all(self) -> list[User]:
        """Return every user, most recently created first."""
        result = await self._execute(
            select(User).order_by(User.created_at.desc(), User.id.desc()),
            context="Error fetching users",
        )
        return list(result.scalars().all())

    async def list_by_role(self, role: UserRole) -> list[User]:
        result = await self._execute(
            select(User).where(User.role == role).order_by(User.name),
            context="Error fetching users by role",
        )
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> User | None:
        result = await self._execute(
            select(User).where(User.name == name),
            context="Error fetching user",
        )
        return result.scalar_one_or_none()

    async def name_taken(self, name: str, *, exclude_id: int | None = None) -> bool:
        """Return ``True`` when another user already uses ``name``."""
        statement = select(func.count()).select_from(User).where(User.name == name)
        if exclude_id is not None:
            statement = statement.where(User.id != exclude_id)
        result = await self._execute(statement, context="Error checking user name")
        return int(result.scalar_one()) > 0

    async def count(self) -> int:
        result = await self._execute(
            select(func.count()).select_from(User),
            context="Error counting users",
        )
        return int(result.scalar_one())

    async def count_assigned_tasks(self, user_id: int) -> int:
        result = await self._execute(
            select(func.count()).select_from(Task).where(Task.assigned_to == user_id),
            context="Error checking assigned tasks",
        )
        return int(result.scalar_one())

    async def delete_by_id(self, user_id: int) -> int:
        """Delete the user row and return the number of rows removed."""
        result = await self._execute(
            delete(User).where(User.id == user_id),
            context="Error deleting user",
        )
        return result.rowcount or 0
