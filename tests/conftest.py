from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from taskboard.core.config import get_settings
from taskboard.main import create_app, lifespan
from taskboard.models import User, UserRole
from taskboard.services import UserService

SESSION_SECRET = "test-session-secret"


@pytest.fixture(autouse=True)
def configure_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    monkeypatch.setenv("TASKBOARD_ENVIRONMENT", "test")
    monkeypatch.setenv("TASKBOARD_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}")
    monkeypatch.setenv("TASKBOARD_SESSION_SECRET_KEY", SESSION_SECRET)
    monkeypatch.delenv("TASKBOARD_LOG_LEVEL", raising=False)
    get_settings.cache_clear()
    try:
        yield
    finally:
        get_settings.cache_clear()


@pytest_asyncio.fixture
async def app() -> AsyncIterator[FastAPI]:
    application = create_app()
    async with lifespan(application):
        yield application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def session(app: FastAPI) -> AsyncIterator[AsyncSession]:
    async with app.state.session_maker() as db_session:
        yield db_session


@pytest.fixture
def make_user(app: FastAPI) -> Callable[..., Awaitable[User]]:
    async def _factory(name: str, role: UserRole = UserRole.WORKER) -> User:
        async with app.state.session_maker() as db_session:
            return await UserService(db_session).create(name=name, role=role)

    return _factory


@pytest.fixture
def login(client: AsyncClient) -> Callable[[str], Awaitable[dict[str, Any]]]:
    """Log ``client`` in as ``name``; the session cookie stays in its jar."""

    async def _login(name: str) -> dict[str, Any]:
        response = await client.post("/api/auth/login", json={"name": name})
        assert response.status_code == 200, response.text
        return response.json()["user"]

    return _login


@pytest.fixture()
def test_client() -> Iterator[TestClient]:
    with TestClient(create_app()) as sync_client:
        yield sync_client
