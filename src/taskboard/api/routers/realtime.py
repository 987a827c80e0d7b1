"""Websocket channel for live task events, presence and task viewers."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from ...core.context import request_context
from ...core.session import SessionIdentity, get_session_identity
from ...deps import BrokerDependency
from ...realtime import ConnectionLimitExceeded, RealtimeBroker
from ...realtime import events
from ...realtime.events import ClientMessage, parse_task_id
from ...services import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

UNAUTHORIZED_CLOSE_CODE = 4401


async def _resolve_identity(websocket: WebSocket) -> SessionIdentity | None:
    """Identity for the session cookie, taken from the stored user record."""

    identity = get_session_identity(websocket.session)
    if identity is None:
        return None
    async with websocket.app.state.session_maker() as session:
        user = await UserService(session).get_by_id(identity.user_id)
    if user is None:
        return None
    return SessionIdentity(user_id=user.id, name=user.name, role=user.role.value)


async def _announce_roster(broker: RealtimeBroker) -> None:
    await broker.broadcast(events.USERS_UPDATED, await broker.roster())


async def _handle_message(broker: RealtimeBroker, connection_id: str, message: ClientMessage) -> None:
    identity = broker.identity_of(connection_id)
    if identity is None:
        return

    if message.event == events.USER_JOIN:
        roster = await broker.join_presence(connection_id)
        await broker.broadcast(events.USERS_UPDATED, roster)
        return

    if message.event in (events.TASK_VIEWING, events.TASK_STOP_VIEWING):
        task_id = parse_task_id(message.data)
        if task_id is None:
            await broker.send(
                connection_id,
                events.ERROR,
                {"reason": "invalid_task_id", "detail": "Expected a task id."},
            )
            return
        payload = {"taskId": task_id, "user": identity.as_public()}
        if message.event == events.TASK_VIEWING:
            if await broker.start_viewing(connection_id, task_id):
                await broker.broadcast_to_viewers(task_id, events.VIEWER_JOINED, payload, exclude=connection_id)
        elif await broker.stop_viewing(connection_id, task_id):
            await broker.broadcast_to_viewers(task_id, events.VIEWER_LEFT, payload)
        return

    if message.event == events.NOTIFICATION_READ:
        # Read state lives on the client; the server only acknowledges.
        await broker.send(connection_id, events.NOTIFICATION_READ_CONFIRM, message.data)
        return

    await broker.send(
        connection_id,
        events.ERROR,
        {"reason": "unknown_event", "detail": f"Unsupported event {message.event!r}."},
    )


async def _handle_disconnect(broker: RealtimeBroker, connection_id: str, identity: SessionIdentity) -> None:
    _entry, viewed = await broker.disconnect(connection_id)
    payload_user = identity.as_public()
    for task_id in viewed:
        await broker.broadcast_to_viewers(
            task_id,
            events.VIEWER_LEFT,
            {"taskId": task_id, "user": payload_user},
        )
    await _announce_roster(broker)


@router.websocket("/ws")
async def realtime_channel(websocket: WebSocket, broker: BrokerDependency) -> None:
    """Push task events to a logged-in client and track its presence."""

    with request_context():
        identity = await _resolve_identity(websocket)
        if identity is None:
            logger.warning("Rejected realtime connection without a session")
            await websocket.close(code=UNAUTHORIZED_CLOSE_CODE)
            return

        try:
            connection_id = await broker.connect(websocket, identity)
        except ConnectionLimitExceeded:
            logger.warning("Realtime connection limit reached", extra={"user_id": identity.user_id})
            await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
            return

    try:
        while True:
            try:
                raw = await websocket.receive_json()
            except json.JSONDecodeError:
                await broker.send(
                    connection_id,
                    events.ERROR,
                    {"reason": "invalid_json", "detail": "Messages must be valid JSON objects."},
                )
                continue

            try:
                message = ClientMessage.model_validate(raw)
            except ValidationError as exc:
                await broker.send(
                    connection_id,
                    events.ERROR,
                    {
                        "reason": "validation_error",
                        "detail": exc.errors(include_url=False, include_context=False),
                    },
                )
                continue

            with request_context():
                await _handle_message(broker, connection_id, message)
    except WebSocketDisconnect:
        pass
    finally:
        await _handle_disconnect(broker, connection_id, identity)
