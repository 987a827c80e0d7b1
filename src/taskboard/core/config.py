"""Service configuration read from ``TASKBOARD_*`` variables and ``.env``."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated, Any, Literal, Sequence

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .. import __version__ as package_version

EnvironmentName = Literal["development", "test", "ci", "production"]

# Read from the environment as comma separated text rather than JSON.
CommaSeparated = Annotated[list[str], NoDecode]

_ENVIRONMENT_SYNONYMS: dict[str, EnvironmentName] = {
    "dev": "development",
    "local": "development",
    "testing": "test",
    "prod": "production",
}

# Defaults each environment applies to fields the caller did not set.
_PROFILE_DEFAULTS: dict[EnvironmentName, dict[str, Any]] = {
    "development": {"log_level": "DEBUG", "reload": True, "db_echo": False},
    "test": {"log_level": "WARNING", "reload": False, "db_echo": False},
    "ci": {"log_level": "INFO", "reload": False, "db_echo": False},
    "production": {"log_level": "INFO", "reload": False, "db_echo": False, "session_https_only": True},
}

_SAME_SITE_POLICIES = frozenset({"lax", "strict", "none"})


class Settings(BaseSettings):
    """Runtime configuration for the task board service."""

    model_config = SettingsConfigDict(
        env_prefix="TASKBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "Taskboard"
    environment: EnvironmentName = "development"
    version: str = package_version
    api_prefix: str = "/api"

    database_url: str = "sqlite+aiosqlite:///./tasks.db"
    db_echo: bool = False

    app_host: str = "0.0.0.0"
    app_port: int = 3000
    reload: bool = True
    log_level: str = "INFO"

    cors_allow_origins: CommaSeparated = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
    )
    cors_allow_credentials: bool = True
    cors_allow_methods: CommaSeparated = Field(default_factory=lambda: ["*"])
    cors_allow_headers: CommaSeparated = Field(default_factory=lambda: ["*"])

    session_secret_key: str = "change-me-session"
    session_cookie_name: str = "taskboard_session"
    session_max_age: int | None = 60 * 60 * 24
    session_https_only: bool = False
    session_same_site: str = "lax"

    default_admin_name: str = "admin"
    websocket_max_connections: int = 500

    @field_validator("environment", mode="before")
    @classmethod
    def _resolve_environment(cls, value: object) -> str:
        name = value.strip().lower() if isinstance(value, str) else ""
        name = _ENVIRONMENT_SYNONYMS.get(name, name)
        return name if name in _PROFILE_DEFAULTS else "development"

    @field_validator("cors_allow_origins", "cors_allow_methods", "cors_allow_headers", mode="before")
    @classmethod
    def _split_origin_lists(cls, value: object) -> list[str]:
        """Accept ``"a, b"`` as well as a list."""

        if isinstance(value, str):
            items: Sequence[object] = value.split(",")
        elif isinstance(value, Sequence):
            items = value
        else:
            return []
        return [str(item).strip() for item in items if str(item).strip()]

    @field_validator("log_level", mode="before")
    @classmethod
    def _known_log_level(cls, value: object) -> str:
        level = str(value).strip().upper() if value is not None else ""
        return level if isinstance(logging.getLevelName(level), int) else "INFO"

    @field_validator("default_admin_name", mode="before")
    @classmethod
    def _admin_name_or_default(cls, value: object) -> str:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return "admin"

    @field_validator("websocket_max_connections", mode="before")
    @classmethod
    def _at_least_one_connection(cls, value: object) -> int:
        try:
            return max(int(value), 1)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 500

    @field_validator("session_same_site", mode="before")
    @classmethod
    def _same_site_policy(cls, value: object) -> str:
        policy = value.lower() if isinstance(value, str) else ""
        return policy if policy in _SAME_SITE_POLICIES else "lax"

    @model_validator(mode="after")
    def _fill_profile_defaults(self) -> "Settings":
        explicit = self.model_fields_set
        for name, default in _PROFILE_DEFAULTS[self.environment].items():
            if name not in explicit:
                setattr(self, name, default)
        return self


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide ``Settings``; tests call ``cache_clear()``."""

    return Settings()
