"""Cookie-session helpers for the name-only login flow.

The session carries the user id plus a display copy of the name and role.
Only the id is trusted; role checks always go back to the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, MutableMapping

from ..errors import UnauthorizedError

SESSION_USER_KEY = "user_id"
SESSION_NAME_KEY = "user_name"
SESSION_ROLE_KEY = "user_role"


@dataclass(slots=True, frozen=True)
class SessionIdentity:
    """Who the current session belongs to, as recorded at login time."""

    user_id: int
    name: str | None = None
    role: str | None = None

    def as_public(self) -> dict[str, Any]:
        return {"id": self.user_id, "name": self.name, "role": self.role}


def get_session_user_id(session: MutableMapping[str, Any]) -> int | None:
    """Return the authenticated user's identifier stored in the session."""

    raw = session.get(SESSION_USER_KEY)
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw))
    except (TypeError, ValueError):
        return None


def get_session_identity(session: MutableMapping[str, Any]) -> SessionIdentity | None:
    user_id = get_session_user_id(session)
    if user_id is None:
        return None
    return SessionIdentity(
        user_id=user_id,
        name=session.get(SESSION_NAME_KEY),
        role=session.get(SESSION_ROLE_KEY),
    )


def authenticate(session: MutableMapping[str, Any]) -> SessionIdentity:
    """Return the session identity or raise ``UnauthorizedError``."""

    identity = get_session_identity(session)
    if identity is None:
        raise UnauthorizedError("Authentication required")
    return identity


def login_user(session: MutableMapping[str, Any], *, user_id: int, name: str, role: str) -> None:
    session[SESSION_USER_KEY] = int(user_id)
    session[SESSION_NAME_KEY] = name
    session[SESSION_ROLE_KEY] = role


def logout_user(session: MutableMapping[str, Any]) -> None:
    """Drop every key this module writes, which ends the session."""

    session.clear()


__all__ = [
    "SESSION_NAME_KEY",
    "SESSION_ROLE_KEY",
    "SESSION_USER_KEY",
    "SessionIdentity",
    "authenticate",
    "get_session_identity",
    "get_session_user_id",
    "login_user",
    "logout_user",
]
