"""Bootstrap and demo data."""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import get_settings
from ..core.logging import configure_logging
from ..models import ProgressState, TaskPriority, TaskStatus, User, UserRole
from ..services import TaskService, UserService
from .session import create_engine_from_settings, create_session_maker, init_db

logger = logging.getLogger(__name__)


async def ensure_default_admin(
    session_maker: async_sessionmaker[AsyncSession],
    name: str = "admin",
) -> User | None:
    """Create the first administrator when the directory is empty.

    Returns the new user, or ``None`` when users already exist.
    """
    async with session_maker() as session:
        service = UserService(session)
        if await service.repository.count() > 0:
            return None
        admin = await service.create(name=name, role=UserRole.ADMIN)
    logger.info("Seeded default administrator", extra={"user_id": admin.id})
    return admin


async def seed(session_maker: async_sessionmaker[AsyncSession], admin_name: str = "admin") -> None:
    """Populate an empty board with a few users and tasks for local development."""
    await ensure_default_admin(session_maker, admin_name)
    async with session_maker() as session:
        users = UserService(session)
        tasks = TaskService(session)

        admin = await users.get_by_name(admin_name)
        if admin is None:  # pragma: no cover - created above
            raise RuntimeError("Default administrator is missing")
        if await tasks.list():
            return

        maria = await users.get_by_name("maria") or await users.create(name="maria", role=UserRole.WORKER)
        jorge = await users.get_by_name("jorge") or await users.create(name="jorge", role=UserRole.WORKER)

        inventory = await tasks.create(
            created_by=admin.id,
            title="Prepare quarterly inventory",
            description="Count stock in both warehouses.",
            priority=TaskPriority.HIGH,
            assigned_to=maria.id,
        )
        await tasks.add_update(
            inventory.task.id,
            author_id=maria.id,
            comment="First warehouse done.",
            progress_state=ProgressState.IN_PROGRESS,
        )
        supplier = await tasks.create(
            created_by=admin.id,
            title="Call the packaging supplier",
            assigned_to=jorge.id,
        )
        await tasks.change_status(supplier.task.id, TaskStatus.COMPLETED, changed_by=admin.id)
        await tasks.create(
            created_by=admin.id,
            title="Plan the summer schedule",
            priority=TaskPriority.LOW,
        )


async def _run() -> None:
    settings = get_settings()
    configure_logging(settings)
    engine = create_engine_from_settings(settings)
    try:
        await init_db(engine)
        await seed(create_session_maker(engine), settings.default_admin_name)
    finally:
        await engine.dispose()


def main() -> None:
    """Entry-point hook for ``python -m`` execution."""
    asyncio.run(_run())


if __name__ == "__main__":  # pragma: no cover - manual execution entry-point
    main()
