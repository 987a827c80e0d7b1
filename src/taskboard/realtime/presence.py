"""In-memory roster of connected users and the tasks they are viewing."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..core.session import SessionIdentity
from ..models.common import utcnow


@dataclass(slots=True)
class PresenceEntry:
    connection_id: str
    identity: SessionIdentity
    joined_at: datetime = field(default_factory=utcnow)

    def as_payload(self) -> dict[str, Any]:
        return {
            "id": self.identity.user_id,
            "name": self.identity.name,
            "role": self.identity.role,
            "connectionId": self.connection_id,
            "joinedAt": self.joined_at.isoformat(),
        }


class PresenceRegistry:
    """Roster keyed by connection id, plus task viewers.

    Not thread-safe; the owning broker serialises access with its lock.
    """

    def __init__(self) -> None:
        self._entries: dict[str, PresenceEntry] = {}
        self._viewers: dict[int, set[str]] = defaultdict(set)

    def add(self, connection_id: str, identity: SessionIdentity) -> PresenceEntry:
        """Add or refresh the roster entry for ``connection_id``."""
        entry = PresenceEntry(connection_id=connection_id, identity=identity)
        self._entries[connection_id] = entry
        return entry

    def remove(self, connection_id: str) -> tuple[PresenceEntry | None, list[int]]:
        """Forget a connection; returns its entry and the tasks it was viewing."""
        entry = self._entries.pop(connection_id, None)
        viewed: list[int] = []
        for task_id in list(self._viewers):
            connections = self._viewers[task_id]
            if connection_id in connections:
                connections.discard(connection_id)
                viewed.append(task_id)
            if not connections:
                del self._viewers[task_id]
        return entry, sorted(viewed)

    def snapshot(self) -> list[dict[str, Any]]:
        """Roster payload in join order."""
        return [entry.as_payload() for entry in self._entries.values()]

    def start_viewing(self, connection_id: str, task_id: int) -> bool:
        connections = self._viewers[task_id]
        if connection_id in connections:
            return False
        connections.add(connection_id)
        return True

    def stop_viewing(self, connection_id: str, task_id: int) -> bool:
        connections = self._viewers.get(task_id)
        if not connections or connection_id not in connections:
            return False
        connections.discard(connection_id)
        if not connections:
            del self._viewers[task_id]
        return True

    def viewers(self, task_id: int) -> set[str]:
        return set(self._viewers.get(task_id, ()))

    def clear(self) -> None:
        self._entries.clear()
        self._viewers.clear()


__all__ = ["PresenceEntry", "PresenceRegistry"]
