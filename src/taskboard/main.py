"""Application factory and ``taskboard`` console entry point."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from .api.routers import api_router, health_router, realtime_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .db import create_engine_from_settings, create_session_maker, init_db
from .db.seed import ensure_default_admin
from .deps import SettingsDependency
from .errors import register_exception_handlers
from .realtime import RealtimeBroker
from .schemas import RootResponse

logger = logging.getLogger(__name__)


def _normalise_prefix(raw_prefix: str) -> str:
    """``"api/"`` -> ``"/api"``; an empty or bare ``/`` prefix mounts at the root."""
    prefix = "/" + raw_prefix.strip().strip("/")
    return "" if prefix == "/" else prefix


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Create tables and the first admin on startup; release connections on shutdown."""

    state = application.state
    await init_db(state.engine)
    await ensure_default_admin(state.session_maker, state.settings.default_admin_name)
    logger.info("Task board ready", extra={"environment": state.settings.environment})
    try:
        yield
    finally:
        await state.broker.reset()
        await state.engine.dispose()
        logger.info("Task board stopped")


def _install_middleware(application: FastAPI, settings: Settings) -> None:
    # Added innermost first: CORS wraps sessions, sessions wrap correlation ids.
    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age,
        same_site=settings.session_same_site,
        https_only=settings.session_https_only,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )


def create_app() -> FastAPI:
    """Build a fully wired application with its own engine and realtime broker."""

    settings = get_settings()
    configure_logging(settings)
    api_prefix = _normalise_prefix(settings.api_prefix)

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Multi-user task board with live updates.",
        openapi_url=f"{api_prefix}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    engine = create_engine_from_settings(settings)
    application.state.settings = settings
    application.state.engine = engine
    application.state.session_maker = create_session_maker(engine)
    application.state.broker = RealtimeBroker(max_connections=settings.websocket_max_connections)

    _install_middleware(application, settings)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=api_prefix)
    application.include_router(health_router)
    application.include_router(realtime_router)

    @application.get("/", response_model=RootResponse, summary="Service metadata")
    async def describe_service(current: SettingsDependency) -> RootResponse:
        return RootResponse(
            name=current.project_name,
            environment=current.environment,
            version=current.version,
            api_prefix=api_prefix,
        )

    return application


app = create_app()


def run() -> None:
    """Serve ``taskboard.main:app`` with uvicorn using the configured host and port."""

    settings = get_settings()
    uvicorn.run(
        "taskboard.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )
