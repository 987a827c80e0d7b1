"""Repository for progress updates."""

from __future__ import annotations

from dataclasses import dataclass

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import ProgressUpdate, User
from .base import BaseRepository


@dataclass(slots=True)
class ProgressUpdateListing:
    update: ProgressUpdate
    user_name: str | None


def _listing_query():
    return select(ProgressUpdate, User.name).join(
        User, ProgressUpdate.user_id == User.id, isouter=True
    )


class ProgressUpdateRepository(BaseRepository[ProgressUpdate]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ProgressUpdate)

    async def list_for_task(self, task_id: int) -> list[ProgressUpdateListing]:
        """Return the task's updates, newest first, with the author's name."""
        result = await self._execute(
            _listing_query()
            .where(ProgressUpdate.task_id == task_id)
            .order_by(ProgressUpdate.timestamp.desc(), ProgressUpdate.id.desc()),
            context="Error fetching task updates",
        )
        return [ProgressUpdateListing(update, user_name) for update, user_name in result.all()]

    async def get_listing(self, update_id: int) -> ProgressUpdateListing | None:
        result = await self._execute(
            _listing_query().where(ProgressUpdate.id == update_id),
            context="Error fetching task update",
        )
        row = result.first()
        if row is None:
            return None
        update, user_name = row
        return ProgressUpdateListing(update, user_name)


__all__ = ["ProgressUpdateListing", "ProgressUpdateRepository"]
