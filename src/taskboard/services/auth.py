"""Session gate: name-only login and per-request admin checks."""

from __future__ import annotations

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.session import SessionIdentity
from ..errors import ForbiddenError, PersistenceError, ServerError, UnauthorizedError, ValidationError
from ..models import User
from .users import UserService

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, session: AsyncSession) -> None:
        self._users = UserService(session)

    async def login(self, name: str | None) -> User:
        """Resolve a login name to a stored user.

        There is no password; knowing a name is enough.
        """
        if name is None or not name.strip():
            raise ValidationError("Name is required")
        user = await self._users.get_by_name(name)
        if user is None:
            logger.warning("Login rejected for unknown user name")
            raise UnauthorizedError("User not found")
        logger.info("User logged in", extra={"user_id": user.id})
        return user

    async def authorize_admin(self, identity: SessionIdentity) -> None:
        """Check the stored role for ``identity``; the session's cached role is ignored."""
        try:
            allowed = await self._users.is_admin(identity.user_id)
        except PersistenceError as exc:
            raise ServerError("Error checking permissions") from exc
        if not allowed:
            raise ForbiddenError("Admin access required")


__all__ = ["AuthService"]
