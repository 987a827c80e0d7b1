"""Database engine, schema bootstrap and seed data."""

from __future__ import annotations

from .session import create_engine_from_settings, create_session_maker, init_db

__all__ = ["create_engine_from_settings", "create_session_maker", "init_db"]
