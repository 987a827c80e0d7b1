from __future__ import annotations

import re

import pytest

from taskboard import __version__
from taskboard.core.config import Settings


def test_environment_profiles_apply_defaults() -> None:
    dev = Settings(environment="development")
    assert dev.environment == "development"
    assert dev.log_level == "DEBUG"
    assert dev.reload is True

    test_profile = Settings(environment="test")
    assert test_profile.environment == "test"
    assert test_profile.log_level == "WARNING"
    assert test_profile.reload is False
    assert test_profile.db_echo is False

    ci_profile = Settings(environment="ci")
    assert ci_profile.log_level == "INFO"
    assert ci_profile.reload is False

    production = Settings(environment="production")
    assert production.log_level == "INFO"
    assert production.session_https_only is True


def test_environment_aliases_are_normalised() -> None:
    assert Settings(environment="DEV").environment == "development"
    assert Settings(environment="testing").environment == "test"
    assert Settings(environment="Prod").environment == "production"
    assert Settings(environment="staging").environment == "development"


def test_environment_profile_respects_explicit_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKBOARD_LOG_LEVEL", "error")
    assert Settings(environment="test").log_level == "ERROR"

    monkeypatch.setenv("TASKBOARD_DB_ECHO", "true")
    assert Settings(environment="test").db_echo is True


def test_defaults_and_coercions(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TASKBOARD_DATABASE_URL", raising=False)
    monkeypatch.setenv("TASKBOARD_CORS_ALLOW_ORIGINS", "http://a.test, http://b.test ,")
    monkeypatch.setenv("TASKBOARD_SESSION_SAME_SITE", "Sideways")
    monkeypatch.setenv("TASKBOARD_WEBSOCKET_MAX_CONNECTIONS", "0")

    settings = Settings()

    assert settings.database_url == "sqlite+aiosqlite:///./tasks.db"
    assert settings.api_prefix == "/api"
    assert settings.app_port == 3000
    assert settings.session_max_age == 86400
    assert settings.default_admin_name == "admin"
    assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert settings.session_same_site == "lax"
    assert settings.websocket_max_connections == 1


def test_version_is_semantic() -> None:
    assert re.fullmatch(r"\d+\.\d+\.\d+", __version__)
    assert Settings().version == __version__
