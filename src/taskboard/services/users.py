"""Identity directory: user validation and lifecycle rules."""

from __future__ import annotations

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import ConflictError, DependentRecordsError, NotFoundError, ValidationError
from ..models import User, UserRole
from ..models.common import utcnow
from ..repositories import UserRepository

logger = logging.getLogger(__name__)


def coerce_role(value: UserRole | str | None) -> UserRole:
    """Return ``value`` as a ``UserRole`` or raise ``ValidationError``."""
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(value)
    except ValueError as exc:
        raise ValidationError("Invalid role", details={"allowed": [role.value for role in UserRole]}) from exc


def _clean_name(name: str | None) -> str | None:
    if name is None:
        return None
    cleaned = name.strip()
    return cleaned or None


class UserService:
    """High-level business orchestration for ``User`` entities."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = UserRepository(session)

    @property
    def repository(self) -> UserRepository:
        return self._repository

    def _validate(self, name: str | None, role: UserRole | str | None) -> tuple[str, UserRole]:
        cleaned = _clean_name(name)
        if cleaned is None or role is None:
            raise ValidationError("Name and role are required")
        return cleaned, coerce_role(role)

    async def create(self, *, name: str | None, role: UserRole | str | None) -> User:
        cleaned, parsed_role = self._validate(name, role)
        if await self._repository.get_by_name(cleaned) is not None:
            raise ConflictError("User name already exists")

        user = User(name=cleaned, role=parsed_role, created_at=utcnow())
        await self._repository.add(user)
        await self._session.commit()
        await self._repository.refresh(user)
        logger.info("User created", extra={"user_id": user.id, "role": parsed_role.value})
        return user

    async def update(self, user_id: int, *, name: str | None, role: UserRole | str | None) -> User:
        """Replace a user's name and role."""
        cleaned, parsed_role = self._validate(name, role)
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if await self._repository.name_taken(cleaned, exclude_id=user_id):
            raise ConflictError("User name already exists")

        user.name = cleaned
        user.role = parsed_role
        await self._session.commit()
        await self._repository.refresh(user)
        logger.info("User updated", extra={"user_id": user_id})
        return user

    async def delete(self, user_id: int) -> None:
        """Remove a user that no task is assigned to."""
        if await self._repository.count_assigned_tasks(user_id) > 0:
            raise DependentRecordsError("Cannot delete user with assigned tasks. Reassign tasks first")
        removed = await self._repository.delete_by_id(user_id)
        if removed == 0:
            raise NotFoundError("User not found")
        await self._session.commit()
        logger.info("User deleted", extra={"user_id": user_id})

    async def get_all(self) -> list[User]:
        return await self._repository.list_all()

    async def get_by_role(self, role: UserRole | str) -> list[User]:
        return await self._repository.list_by_role(coerce_role(role))

    async def get_by_id(self, user_id: int) -> User | None:
        return await self._repository.get(user_id)

    async def get_by_name(self, name: str) -> User | None:
        cleaned = _clean_name(name)
        if cleaned is None:
            return None
        return await self._repository.get_by_name(cleaned)

    async def is_admin(self, user_id: int) -> bool:
        """Return whether the stored user holds the admin role; unknown ids are not admins."""
        user = await self._repository.get(user_id)
        return user is not None and user.role == UserRole.ADMIN


__all__ = ["UserService", "coerce_role"]
