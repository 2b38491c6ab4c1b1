"""GraphQL types for chat events.

Field names mirror the HR database columns (snake_case), which is what the
mobile and web clients already select. Event payloads are plain mappings;
``from_payload`` builds the typed object and tolerates missing optional
columns and JSON-encoded aggregates.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

import strawberry

from hrchat_service.features.chat.payloads import normalize_chat, normalize_participants


def _id(value: Any) -> strawberry.ID:
    return strawberry.ID("" if value is None else str(value))


def _optional_id(value: Any) -> strawberry.ID | None:
    return None if value is None else strawberry.ID(str(value))


def _text(value: Any) -> str | None:
    """Render timestamps the way the REST API does (ISO 8601)."""
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _optional_bool(value: Any) -> bool | None:
    return None if value is None else bool(value)


@strawberry.type(name="ChatParticipant", description="A member of a chat")
class ChatParticipantType:
    id: strawberry.ID
    name: str | None = None
    email: str | None = None
    image: str | None = None
    is_online: bool | None = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> ChatParticipantType:
        return cls(
            id=_id(data.get("id")),
            name=data.get("name"),
            email=data.get("email"),
            image=data.get("image"),
            is_online=_optional_bool(data.get("is_online")),
        )


@strawberry.type(name="ChatLastMessage", description="Preview of the newest message in a chat")
class ChatLastMessageType:
    id: strawberry.ID
    sender_id: strawberry.ID
    created_at: str
    content: str | None = None
    media_url: str | None = None
    media_type: str | None = None
    sender_name: str | None = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> ChatLastMessageType:
        return cls(
            id=_id(data.get("id")),
            sender_id=_id(data.get("sender_id")),
            created_at=_text(data.get("created_at")) or "",
            content=data.get("content"),
            media_url=data.get("media_url"),
            media_type=data.get("media_type"),
            sender_name=data.get("sender_name"),
        )


@strawberry.type(name="Chat", description="A direct or group conversation")
class ChatType:
    id: strawberry.ID
    type: str
    is_active: bool
    created_at: str
    updated_at: str
    name: str | None = None
    last_message_id: strawberry.ID | None = None
    last_message_at: str | None = None
    created_by: strawberry.ID | None = None
    deleted_at: str | None = None
    participants: list[ChatParticipantType | None] | None = None
    last_message: ChatLastMessageType | None = None
    unread_count: int | None = None
    other_participant: ChatParticipantType | None = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> ChatType:
        """Build a chat from a (possibly partially encoded) chat row."""
        data = normalize_chat(data)
        participants = [
            ChatParticipantType.from_payload(p)
            for p in normalize_participants(data.get("participants"))
            if isinstance(p, Mapping)
        ]
        last_message = data.get("last_message")
        other = data.get("other_participant")

        unread = data.get("unread_count")
        return cls(
            id=_id(data.get("id")),
            type=str(data.get("type") or ""),
            is_active=bool(data.get("is_active", True)),
            created_at=_text(data.get("created_at")) or "",
            updated_at=_text(data.get("updated_at")) or "",
            name=data.get("name"),
            last_message_id=_optional_id(data.get("last_message_id")),
            last_message_at=_text(data.get("last_message_at")),
            created_by=_optional_id(data.get("created_by")),
            deleted_at=_text(data.get("deleted_at")),
            participants=participants,
            last_message=(
                ChatLastMessageType.from_payload(last_message)
                if isinstance(last_message, Mapping)
                else None
            ),
            unread_count=int(unread) if unread is not None else None,
            other_participant=(
                ChatParticipantType.from_payload(other) if isinstance(other, Mapping) else None
            ),
        )


@strawberry.type(name="MessageSender", description="Author of a message")
class MessageSenderType:
    id: strawberry.ID
    name: str | None = None
    email: str | None = None
    image: str | None = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> MessageSenderType:
        return cls(
            id=_id(data.get("id")),
            name=data.get("name"),
            email=data.get("email"),
            image=data.get("image"),
        )


@strawberry.type(name="MessageRead", description="Read receipt of one user")
class MessageReadType:
    user_id: strawberry.ID
    read_at: str

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> MessageReadType:
        return cls(user_id=_id(data.get("user_id")), read_at=_text(data.get("read_at")) or "")


@strawberry.type(name="Message", description="A chat message")
class MessageType:
    id: strawberry.ID
    chat_id: strawberry.ID
    sender_id: strawberry.ID
    media_type: str
    status: str
    created_at: str
    updated_at: str
    content: str | None = None
    media_url: str | None = None
    sender: MessageSenderType | None = None
    chat: ChatType | None = None
    read_by: list[MessageReadType | None] | None = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> MessageType:
        """Build a message, including its nested sender, chat and receipts."""
        sender = data.get("sender")
        chat = data.get("chat")
        read_by = data.get("read_by")
        return cls(
            id=_id(data.get("id")),
            chat_id=_id(data.get("chat_id")),
            sender_id=_id(data.get("sender_id")),
            media_type=str(data.get("media_type") or "text"),
            status=str(data.get("status") or "sent"),
            created_at=_text(data.get("created_at")) or "",
            updated_at=_text(data.get("updated_at")) or "",
            content=data.get("content"),
            media_url=data.get("media_url"),
            sender=MessageSenderType.from_payload(sender) if isinstance(sender, Mapping) else None,
            chat=ChatType.from_payload(chat) if isinstance(chat, Mapping) else None,
            read_by=(
                [MessageReadType.from_payload(r) for r in read_by if isinstance(r, Mapping)]
                if isinstance(read_by, list)
                else None
            ),
        )


__all__ = [
    "ChatLastMessageType",
    "ChatParticipantType",
    "ChatType",
    "MessageReadType",
    "MessageSenderType",
    "MessageType",
]
