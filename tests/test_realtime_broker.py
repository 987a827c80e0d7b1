from __future__ import annotations

from typing import Any

import pytest
from starlette.websockets import WebSocketState

from taskboard.api.routers.realtime import _handle_disconnect, _handle_message
from taskboard.core.session import SessionIdentity
from taskboard.realtime import ConnectionLimitExceeded, PresenceRegistry, RealtimeBroker, TaskEventPublisher
from taskboard.realtime.events import ClientMessage, parse_task_id

ADMIN = SessionIdentity(user_id=1, name="admin", role="admin")
WORKER = SessionIdentity(user_id=2, name="maria", role="trabajador")


class FakeWebSocket:
    """Records frames instead of writing them to a socket."""

    def __init__(self, *, broken: bool = False) -> None:
        self.application_state = WebSocketState.CONNECTING
        self.sent: list[dict[str, Any]] = []
        self.broken = broken

    async def accept(self) -> None:
        self.application_state = WebSocketState.CONNECTED

    async def send_json(self, data: dict[str, Any]) -> None:
        if self.broken:
            raise RuntimeError("socket is gone")
        self.sent.append(data)

    def events(self) -> list[str]:
        return [frame["event"] for frame in self.sent]


def test_presence_registry_tracks_roster_and_viewers() -> None:
    registry = PresenceRegistry()
    registry.add("a", ADMIN)
    registry.add("b", WORKER)
    registry.start_viewing("a", 7)
    registry.start_viewing("b", 7)
    assert registry.start_viewing("a", 3) is True
    assert registry.start_viewing("a", 3) is False

    roster = registry.snapshot()
    assert [entry["connectionId"] for entry in roster] == ["a", "b"]
    assert roster[0]["id"] == 1 and roster[0]["name"] == "admin" and roster[0]["role"] == "admin"
    assert roster[0]["joinedAt"]
    assert registry.viewers(7) == {"a", "b"}

    assert registry.stop_viewing("b", 7) is True
    assert registry.stop_viewing("b", 7) is False

    entry, viewed = registry.remove("a")
    assert entry is not None and entry.identity == ADMIN
    assert viewed == [3, 7]
    assert registry.viewers(7) == set()
    assert [item["connectionId"] for item in registry.snapshot()] == ["b"]

    assert registry.remove("missing") == (None, [])


@pytest.mark.parametrize(
    ("data", "expected"),
    [(5, 5), ("12", 12), ({"taskId": 9}, 9), ({"task_id": "4"}, 4), (True, None), ("abc", None), (None, None)],
)
def test_parse_task_id(data: Any, expected: int | None) -> None:
    assert parse_task_id(data) == expected


@pytest.mark.asyncio
async def test_broadcast_skips_excluded_and_drops_broken_clients() -> None:
    broker = RealtimeBroker()
    healthy, broken, other = FakeWebSocket(), FakeWebSocket(broken=True), FakeWebSocket()
    first = await broker.connect(healthy, ADMIN)
    await broker.connect(broken, WORKER)
    third = await broker.connect(other, WORKER)

    await broker.broadcast("task:deleted", {"id": 3}, exclude=third)

    assert healthy.sent == [{"event": "task:deleted", "data": {"id": 3}}]
    assert other.sent == []
    assert broker.connection_count == 2
    assert broker.identity_of(first) == ADMIN


@pytest.mark.asyncio
async def test_connection_limit() -> None:
    broker = RealtimeBroker(max_connections=1)
    await broker.connect(FakeWebSocket(), ADMIN)

    with pytest.raises(ConnectionLimitExceeded):
        await broker.connect(FakeWebSocket(), WORKER)


@pytest.mark.asyncio
async def test_viewer_notifications_go_to_other_viewers_only() -> None:
    broker = RealtimeBroker()
    watching, joining, elsewhere = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
    watching_id = await broker.connect(watching, ADMIN)
    joining_id = await broker.connect(joining, WORKER)
    await broker.connect(elsewhere, WORKER)

    await _handle_message(broker, watching_id, ClientMessage(event="task:viewing", data={"taskId": 8}))
    await _handle_message(broker, joining_id, ClientMessage(event="task:viewing", data=8))

    assert watching.sent == [
        {"event": "task:viewer_joined", "data": {"taskId": 8, "user": WORKER.as_public()}}
    ]
    assert joining.sent == []
    assert elsewhere.sent == []

    await _handle_message(broker, joining_id, ClientMessage(event="task:stop_viewing", data="8"))
    assert watching.events() == ["task:viewer_joined", "task:viewer_left"]
    assert joining.sent == []

    await _handle_message(broker, joining_id, ClientMessage(event="task:viewing", data="eight"))
    await _handle_message(broker, joining_id, ClientMessage(event="chat:message"))
    assert [frame["data"]["reason"] for frame in joining.sent] == ["invalid_task_id", "unknown_event"]


@pytest.mark.asyncio
async def test_repeated_viewing_announces_once() -> None:
    broker = RealtimeBroker()
    watching, joining = FakeWebSocket(), FakeWebSocket()
    watching_id = await broker.connect(watching, ADMIN)
    joining_id = await broker.connect(joining, WORKER)

    await _handle_message(broker, watching_id, ClientMessage(event="task:viewing", data=4))
    await _handle_message(broker, joining_id, ClientMessage(event="task:viewing", data=4))
    await _handle_message(broker, joining_id, ClientMessage(event="task:viewing", data="4"))

    assert watching.events() == ["task:viewer_joined"]


@pytest.mark.asyncio
async def test_notification_read_is_confirmed_to_sender_only() -> None:
    broker = RealtimeBroker()
    reader, other = FakeWebSocket(), FakeWebSocket()
    reader_id = await broker.connect(reader, WORKER)
    await broker.connect(other, ADMIN)

    await _handle_message(broker, reader_id, ClientMessage(event="notification:read", data="n-17"))

    assert reader.sent == [{"event": "notification:read_confirm", "data": "n-17"}]
    assert other.sent == []


@pytest.mark.asyncio
async def test_disconnect_announces_departure() -> None:
    broker = RealtimeBroker()
    staying, leaving = FakeWebSocket(), FakeWebSocket()
    staying_id = await broker.connect(staying, ADMIN)
    leaving_id = await broker.connect(leaving, WORKER)
    await _handle_message(broker, staying_id, ClientMessage(event="user:join"))
    await _handle_message(broker, leaving_id, ClientMessage(event="user:join"))
    await _handle_message(broker, staying_id, ClientMessage(event="task:viewing", data=2))
    await _handle_message(broker, leaving_id, ClientMessage(event="task:viewing", data=2))
    staying.sent.clear()

    await _handle_disconnect(broker, leaving_id, WORKER)

    assert staying.events() == ["task:viewer_left", "users:updated"]
    assert staying.sent[0]["data"] == {"taskId": 2, "user": WORKER.as_public()}
    assert [entry["name"] for entry in staying.sent[1]["data"]] == ["admin"]
    assert broker.connection_count == 1


@pytest.mark.asyncio
async def test_publisher_wraps_events_in_envelope() -> None:
    broker = RealtimeBroker()
    listener = FakeWebSocket()
    await broker.connect(listener, ADMIN)

    await TaskEventPublisher(broker).task_deleted(11)

    assert listener.sent == [{"event": "task:deleted", "data": {"id": 11}}]


@pytest.mark.asyncio
async def test_viewer_dropped_after_failed_send_still_announces_departure() -> None:
    broker = RealtimeBroker()
    staying, leaving = FakeWebSocket(), FakeWebSocket()
    staying_id = await broker.connect(staying, ADMIN)
    leaving_id = await broker.connect(leaving, WORKER)
    await _handle_message(broker, staying_id, ClientMessage(event="task:viewing", data=2))
    await _handle_message(broker, leaving_id, ClientMessage(event="task:viewing", data=2))
    staying.sent.clear()

    leaving.broken = True
    await broker.broadcast("task:updated", {"id": 2})
    assert broker.connection_count == 1

    await _handle_disconnect(broker, leaving_id, WORKER)

    assert staying.events() == ["task:updated", "task:viewer_left", "users:updated"]
    assert staying.sent[1]["data"] == {"taskId": 2, "user": WORKER.as_public()}
