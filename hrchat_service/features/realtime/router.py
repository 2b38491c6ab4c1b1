"""Realtime endpoints: plain WebSocket event stream and fan-out admin API.

Endpoints:
- WS /ws/events: Stream events for the authenticated user
- GET /realtime/stats: Live subscription statistics
- POST /realtime/publish: Publish an event to a user's topic (APP_DEBUG only)
- POST /realtime/notify/message: Send-message fan-out through the chat notifier (APP_DEBUG only)
"""

from __future__ import annotations

import asyncio
from contextlib import suppress
from functools import partial
import json
import logging
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Query, Request, WebSocket, status
from starlette.websockets import WebSocketState

from hrchat_service.core.dependencies.realtime import (  # noqa: TC001
    ChatNotifierDep,
    PublisherDep,
    SessionManagerDep,
)
from hrchat_service.core.exceptions import (
    AuthError,
    ForbiddenException,
    SubscriptionLimitError,
    ValidationException,
)
from hrchat_service.core.settings import get_pubsub_settings
from hrchat_service.features.realtime.schemas import (
    ConnectedFrame,
    EventFrame,
    MessageNotifyRequest,
    NotifyResponse,
    PongFrame,
    PublishRequest,
    PublishResponse,
    StatsResponse,
)
from hrchat_service.infra.logging import log_context
from hrchat_service.infra.realtime.topics import TopicKind, topic_for

if TYPE_CHECKING:
    from hrchat_service.infra.realtime.events import Event
    from hrchat_service.infra.realtime.manager import SessionManager
    from hrchat_service.infra.realtime.session import SubscriptionSession

logger = logging.getLogger(__name__)

ws_router = APIRouter(prefix="/ws", tags=["realtime"])
router = APIRouter(prefix="/realtime", tags=["realtime"])


def frame_serializer(event: Event, *, ensure_ascii: bool = False) -> str:
    """Serialize an event as an ``event`` frame."""
    frame = EventFrame(topic=event.topic, data=event.payload)
    return json.dumps(frame.model_dump(mode="json"), ensure_ascii=ensure_ascii)


class WebSocketSink:
    """Serializes writes from several dispatchers onto one WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._lock = asyncio.Lock()

    async def send(self, data: str) -> None:
        async with self._lock:
            await self._websocket.send_text(data)


def parse_kinds(raw: str) -> list[TopicKind]:
    """Parse a comma-separated kinds list; empty means every kind.

    Raises:
        ValueError: If a kind is unknown.
    """
    kinds: list[TopicKind] = []
    for part in raw.split(","):
        if not part.strip():
            continue
        kind = TopicKind.parse(part)
        if kind not in kinds:
            kinds.append(kind)
    return kinds or list(TopicKind)


@ws_router.websocket("/events")
async def events_websocket(
    websocket: WebSocket,
    manager: SessionManagerDep,
    token: Annotated[str | None, Query(description="User token")] = None,
    kinds: Annotated[
        str, Query(description="Comma-separated event kinds (default: all)"),
    ] = "",
) -> None:
    """Stream events addressed to the authenticated user.

    The token comes from the ``token`` query parameter or the
    ``Authorization`` header. One session is opened per requested kind; an
    invalid token or unknown kind closes the socket with 1008 (policy
    violation) before it is accepted.

    Message Protocol:
        Client → Server:
        - {"type": "ping"}

        Server → Client:
        - {"type": "connected", "subject_id": "...", "topics": [...]}
        - {"type": "event", "topic": "...", "data": {...}}
        - {"type": "pong"}
    """
    credential = token or websocket.headers.get("authorization")

    try:
        requested = parse_kinds(kinds)
    except ValueError as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(e))
        return

    serializer = partial(frame_serializer, ensure_ascii=get_pubsub_settings().ensure_ascii)
    sessions: list[SubscriptionSession] = []
    try:
        for kind in requested:
            sessions.append(
                manager.open(
                    credential,
                    kind,
                    serializer=serializer,
                    metadata={"transport": "websocket"},
                ),
            )
    except AuthError as e:
        _close_all(manager, sessions, "auth-failed")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.detail)
        return
    except SubscriptionLimitError as e:
        _close_all(manager, sessions, "limit-reached")
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER, reason=e.detail)
        return

    subject_id = sessions[0].subject_id or ""
    with log_context(subject_id=subject_id, transport="websocket"):
        await _stream_events(websocket, manager, sessions, subject_id)


async def _stream_events(
    websocket: WebSocket,
    manager: SessionManager,
    sessions: list[SubscriptionSession],
    subject_id: str,
) -> None:
    """Accept the socket and run the sessions' dispatchers until either side stops."""
    sink = WebSocketSink(websocket)
    try:
        await websocket.accept()
        await sink.send(
            ConnectedFrame(
                subject_id=subject_id,
                topics=[s.topic for s in sessions if s.topic],
            ).model_dump_json(),
        )
    except Exception:
        _close_all(manager, sessions, "disconnect")
        raise

    delivery = asyncio.ensure_future(
        asyncio.gather(*(s.dispatcher.run(sink) for s in sessions if s.dispatcher)),
    )
    receiver = asyncio.create_task(_receive_until_disconnect(websocket, sink))
    try:
        done, _ = await asyncio.wait(
            {delivery, receiver}, return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        _close_all(manager, sessions, "disconnect")
        receiver.cancel()
        try:
            with suppress(asyncio.CancelledError):
                await receiver
        except Exception:
            logger.exception("WebSocket receive loop failed", extra={"subject_id": subject_id})
        finally:
            await delivery

    if receiver not in done and websocket.client_state is WebSocketState.CONNECTED:
        # Sessions ended server-side (shutdown or write failure)
        with suppress(RuntimeError):
            await websocket.close(code=status.WS_1001_GOING_AWAY)

    logger.debug(
        "WebSocket event stream finished",
        extra={"subject_id": subject_id, "sessions": len(sessions)},
    )


async def _receive_until_disconnect(websocket: WebSocket, sink: WebSocketSink) -> None:
    """Answer pings until the client goes away. Binary frames are ignored."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return
        raw = message.get("text")
        if raw is None:
            continue
        try:
            frame = json.loads(raw)
        except json.JSONDecodeError:
            continue
        if isinstance(frame, dict) and frame.get("type") == "ping":
            await sink.send(PongFrame().model_dump_json())


def _close_all(
    manager: SessionManager,
    sessions: list[SubscriptionSession],
    reason: str,
) -> None:
    for session in sessions:
        manager.close(session, reason)


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Get subscription statistics",
    description="Returns live session and topic counts of the fan-out core.",
)
async def get_stats(manager: SessionManagerDep) -> StatsResponse:
    """Get current subscription statistics."""
    stats = manager.stats()
    return StatsResponse(
        active_sessions=stats.active_sessions,
        topics=stats.topics,
        lossy_sessions=stats.lossy_sessions,
        dropped_events=stats.dropped_events,
        sessions_by_kind=stats.sessions_by_kind,
    )


@router.post(
    "/publish",
    response_model=PublishResponse,
    summary="Publish an event to a user's topic",
    description="Debug helper: publishes a payload the way chat producers do. Requires APP_DEBUG.",
)
async def publish_event(
    request: Request,
    body: PublishRequest,
    publisher: PublisherDep,
) -> PublishResponse:
    """Publish an event to the topic of ``body.kind`` and ``body.subject_id``."""
    _require_debug(request)

    try:
        topic = topic_for(body.kind, body.subject_id)
    except ValueError as e:
        raise ValidationException(str(e), extra={"subject_id": body.subject_id}) from e
    payload = {body.kind.payload_key: body.payload} if body.wrap else body.payload
    result = await publisher.publish(topic, payload)

    logger.info(
        "Debug publish",
        extra={"topic": topic, "subscribers": result.subscribers, "accepted": result.accepted},
    )
    return PublishResponse(
        topic=result.topic,
        subscribers=result.subscribers,
        accepted=result.accepted,
        dropped=result.dropped,
        failed=result.failed,
    )


@router.post(
    "/notify/message",
    response_model=NotifyResponse,
    summary="Announce a new chat message",
    description=(
        "Debug helper: runs the send-message fan-out, publishing to every "
        "recipient except the sender. Requires APP_DEBUG."
    ),
)
async def notify_message(
    request: Request,
    body: MessageNotifyRequest,
    notifier: ChatNotifierDep,
) -> NotifyResponse:
    """Publish ``body.message`` to the message-received topic of each recipient."""
    _require_debug(request)

    summary = await notifier.message_received(
        body.recipients, body.message, sender_id=body.sender_id,
    )
    return NotifyResponse(topics=summary.topics, accepted=summary.accepted)


def _require_debug(request: Request) -> None:
    if not request.app.debug:
        raise ForbiddenException(
            detail="Publishing over HTTP is only available in debug mode",
            type="debug-only",
        )


__all__ = ["WebSocketSink", "frame_serializer", "parse_kinds", "router", "ws_router"]
