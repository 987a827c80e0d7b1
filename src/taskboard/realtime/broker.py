"""Websocket connection registry and fan-out."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable
from uuid import uuid4

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from ..core.session import SessionIdentity
from .events import ServerEvent
from .presence import PresenceEntry, PresenceRegistry

logger = logging.getLogger(__name__)


class ConnectionLimitExceeded(RuntimeError):
    """Raised when the websocket connection pool is exhausted."""


@dataclass(slots=True)
class _Connection:
    websocket: WebSocket
    identity: SessionIdentity


class RealtimeBroker:
    """Tracks live websocket connections and pushes events to them.

    Delivery is best effort: a client that cannot be written to is dropped
    from the registry and the failure is only logged.
    """

    def __init__(self, max_connections: int = 500) -> None:
        self._connections: dict[str, _Connection] = {}
        self._presence = PresenceRegistry()
        self._max_connections = max_connections
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket, identity: SessionIdentity) -> str:
        """Accept ``websocket`` and return the id it is registered under."""

        async with self._lock:
            if len(self._connections) >= self._max_connections:
                raise ConnectionLimitExceeded("Websocket connection limit reached.")
            connection_id = uuid4().hex
            self._connections[connection_id] = _Connection(websocket, identity)
        await websocket.accept()
        logger.info(
            "Realtime client connected",
            extra={"connection_id": connection_id, "user_id": identity.user_id},
        )
        return connection_id

    async def disconnect(self, connection_id: str) -> tuple[PresenceEntry | None, list[int]]:
        """Forget a connection; returns its roster entry and the tasks it was viewing."""

        async with self._lock:
            self._connections.pop(connection_id, None)
            entry, viewed = self._presence.remove(connection_id)
        logger.info("Realtime client disconnected", extra={"connection_id": connection_id})
        return entry, viewed

    async def join_presence(self, connection_id: str) -> list[dict[str, Any]]:
        """Put the connection's user on the roster and return the full roster."""

        async with self._lock:
            connection = self._connections.get(connection_id)
            if connection is not None:
                self._presence.add(connection_id, connection.identity)
            return self._presence.snapshot()

    async def roster(self) -> list[dict[str, Any]]:
        async with self._lock:
            return self._presence.snapshot()

    async def start_viewing(self, connection_id: str, task_id: int) -> bool:
        """True when the connection was not already viewing ``task_id``."""
        async with self._lock:
            if connection_id not in self._connections:
                return False
            return self._presence.start_viewing(connection_id, task_id)

    async def stop_viewing(self, connection_id: str, task_id: int) -> bool:
        async with self._lock:
            return self._presence.stop_viewing(connection_id, task_id)

    def identity_of(self, connection_id: str) -> SessionIdentity | None:
        connection = self._connections.get(connection_id)
        return connection.identity if connection is not None else None

    async def broadcast(self, event: str, data: Any = None, *, exclude: str | None = None) -> None:
        """Send an event to every connected client."""

        async with self._lock:
            targets = [cid for cid in self._connections if cid != exclude]
        await self._deliver(targets, ServerEvent(event=event, data=data))

    async def broadcast_to_viewers(
        self,
        task_id: int,
        event: str,
        data: Any = None,
        *,
        exclude: str | None = None,
    ) -> None:
        """Send an event to the clients currently viewing ``task_id``."""

        async with self._lock:
            targets = [cid for cid in self._presence.viewers(task_id) if cid != exclude]
        await self._deliver(targets, ServerEvent(event=event, data=data))

    async def send(self, connection_id: str, event: str, data: Any = None) -> None:
        await self._deliver([connection_id], ServerEvent(event=event, data=data))

    async def _deliver(self, connection_ids: Iterable[str], message: ServerEvent) -> None:
        payload = message.model_dump(mode="json")
        stale: list[str] = []
        for connection_id in connection_ids:
            connection = self._connections.get(connection_id)
            if connection is None:
                continue
            websocket = connection.websocket
            if websocket.application_state != WebSocketState.CONNECTED:
                stale.append(connection_id)
                continue
            try:
                await websocket.send_json(payload)
            except (WebSocketDisconnect, RuntimeError):
                logger.warning(
                    "Dropping realtime client after failed send",
                    extra={"connection_id": connection_id, "event": message.event},
                )
                stale.append(connection_id)

        # Roster entries and viewer rooms stay until disconnect() so departures
        # are still announced.
        if stale:
            async with self._lock:
                for connection_id in stale:
                    self._connections.pop(connection_id, None)

    async def reset(self) -> None:
        """Forget every connection; used on shutdown."""

        async with self._lock:
            self._connections.clear()
            self._presence.clear()


__all__ = ["ConnectionLimitExceeded", "RealtimeBroker"]
