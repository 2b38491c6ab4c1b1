"""Pydantic schemas for the realtime WebSocket and REST endpoints.

Frame Types (server → client over /ws/events):
- connected: sent once after the sessions are open
- event: one published event
- pong: reply to a client ping
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from hrchat_service.infra.realtime.topics import TopicKind


class FrameType(StrEnum):
    """Frame types sent from server to client."""

    CONNECTED = "connected"
    EVENT = "event"
    PONG = "pong"


# ──────────────────────────────────────────────────────────────
# WebSocket frames
# ──────────────────────────────────────────────────────────────


class ConnectedFrame(BaseModel):
    """Sent immediately after the subscription sessions are open."""

    type: Literal[FrameType.CONNECTED] = FrameType.CONNECTED
    subject_id: str = Field(..., description="Authenticated user id")
    topics: list[str] = Field(default_factory=list, description="Subscribed topics")


class EventFrame(BaseModel):
    """One event published to a subscribed topic."""

    type: Literal[FrameType.EVENT] = FrameType.EVENT
    topic: str = Field(..., description="Topic the event was published to")
    data: Any = Field(default=None, description="Event payload as published")


class PongFrame(BaseModel):
    """Reply to a client ``{"type": "ping"}``."""

    type: Literal[FrameType.PONG] = FrameType.PONG


# ──────────────────────────────────────────────────────────────
# REST
# ──────────────────────────────────────────────────────────────


class StatsResponse(BaseModel):
    """Live subscription statistics."""

    active_sessions: int = Field(..., ge=0, description="Sessions currently registered")
    topics: int = Field(..., ge=0, description="Topics with at least one subscriber")
    lossy_sessions: int = Field(..., ge=0, description="Sessions that dropped events on overflow")
    dropped_events: int = Field(..., ge=0, description="Events dropped across live sessions")
    sessions_by_kind: dict[str, int] = Field(
        default_factory=dict,
        description="Live sessions per event kind",
    )


class PublishRequest(BaseModel):
    """Publish one event to a user's topic (debug only)."""

    kind: TopicKind = Field(..., description="Event kind")
    subject_id: str = Field(..., min_length=1, max_length=64, description="Recipient user id")
    payload: dict[str, Any] = Field(default_factory=dict, description="Event body")
    wrap: bool = Field(
        default=True,
        description="Nest the body under the kind's payload key (e.g. messageReceived)",
    )

    @field_validator("subject_id", mode="before")
    @classmethod
    def coerce_subject_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class PublishResponse(BaseModel):
    """Outcome of a publish call."""

    topic: str
    subscribers: int
    accepted: int
    dropped: int
    failed: int


class MessageNotifyRequest(BaseModel):
    """A sent message to announce to its recipients (debug only)."""

    recipients: list[int | str | dict[str, Any]] = Field(
        ...,
        min_length=1,
        description="Participant ids or participant objects with an ``id``",
    )
    message: dict[str, Any] = Field(..., description="Message row as stored")
    sender_id: str | None = Field(
        default=None,
        description="Sender to skip; defaults to ``message.sender_id``",
    )

    @field_validator("sender_id", mode="before")
    @classmethod
    def coerce_sender_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class NotifyResponse(BaseModel):
    """Topics a notification was published to."""

    topics: list[str]
    accepted: int


__all__ = [
    "ConnectedFrame",
    "EventFrame",
    "FrameType",
    "MessageNotifyRequest",
    "NotifyResponse",
    "PongFrame",
    "PublishRequest",
    "PublishResponse",
    "StatsResponse",
]
