"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from starlette.requests import HTTPConnection, Request

from .core.config import Settings, get_settings
from .core.session import SessionIdentity, authenticate
from .realtime import RealtimeBroker, TaskEventPublisher
from .services import AuthService

SettingsDependency = Annotated[Settings, Depends(get_settings)]


async def get_db_session(connection: HTTPConnection) -> AsyncIterator[AsyncSession]:
    """Yield a session from the factory the app was built with.

    Typed on ``HTTPConnection`` so websocket routes can depend on it too.
    """

    session_maker: async_sessionmaker[AsyncSession] = connection.app.state.session_maker
    async with session_maker() as session:
        yield session


DatabaseSessionDependency = Annotated[AsyncSession, Depends(get_db_session)]


def get_broker(connection: HTTPConnection) -> RealtimeBroker:
    return connection.app.state.broker


BrokerDependency = Annotated[RealtimeBroker, Depends(get_broker)]


def get_publisher(broker: BrokerDependency) -> TaskEventPublisher:
    return TaskEventPublisher(broker)


PublisherDependency = Annotated[TaskEventPublisher, Depends(get_publisher)]


def require_identity(request: Request) -> SessionIdentity:
    return authenticate(request.session)


CurrentIdentityDependency = Annotated[SessionIdentity, Depends(require_identity)]


async def require_admin(
    identity: CurrentIdentityDependency,
    session: DatabaseSessionDependency,
) -> SessionIdentity:
    """Authenticate, then confirm the stored role is admin on every request."""

    await AuthService(session).authorize_admin(identity)
    return identity


AdminIdentityDependency = Annotated[SessionIdentity, Depends(require_admin)]


__all__ = [
    "AdminIdentityDependency",
    "BrokerDependency",
    "CurrentIdentityDependency",
    "DatabaseSessionDependency",
    "PublisherDependency",
    "SettingsDependency",
    "get_broker",
    "get_db_session",
    "get_publisher",
    "require_admin",
    "require_identity",
]
