"""Chat event producers.

Chat mutations (sending a message, marking it seen, changing a chat's
membership) call into :class:`ChatNotifier` after their database work is
done. The notifier only addresses and publishes; it never waits for a
subscriber and never fails because of one.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any

from hrchat_service.features.chat.payloads import normalize_chat, participant_ids
from hrchat_service.infra.realtime.topics import TopicKind, topic_for

if TYPE_CHECKING:
    from hrchat_service.infra.realtime.publisher import EventPublisher, PublishResult

logger = logging.getLogger(__name__)


@dataclass
class NotificationSummary:
    """Publish results of one notifier call."""

    results: list[PublishResult] = field(default_factory=list)

    @property
    def published(self) -> int:
        return len(self.results)

    @property
    def accepted(self) -> int:
        """Total sessions that queued one of the events."""
        return sum(r.accepted for r in self.results)

    @property
    def topics(self) -> list[str]:
        return [r.topic for r in self.results]


class ChatNotifier:
    """Publishes chat events to the topics of the users they concern."""

    def __init__(self, publisher: EventPublisher) -> None:
        self._publisher = publisher

    async def message_received(
        self,
        recipients: Iterable[Any],
        message: Mapping[str, Any],
        *,
        sender_id: int | str | None = None,
    ) -> NotificationSummary:
        """Announce a new message to every recipient except its sender.

        ``recipients`` may be participant mappings (with ``id``) or bare ids.
        ``sender_id`` defaults to the message's own ``sender_id``.
        """
        sender = sender_id if sender_id is not None else message.get("sender_id")
        sender_key = str(sender) if sender is not None else None

        summary = NotificationSummary()
        for user_id in participant_ids(recipients):
            if user_id == sender_key:
                continue
            summary.results.append(
                await self._publish(TopicKind.MESSAGE_RECEIVED, user_id, dict(message)),
            )
        return summary

    async def message_status_changed(
        self,
        participants: Iterable[Any],
        message: Mapping[str, Any],
    ) -> NotificationSummary:
        """Announce a status change to every participant, sender included."""
        summary = NotificationSummary()
        for user_id in participant_ids(participants):
            summary.results.append(
                await self._publish(TopicKind.MESSAGE_STATUS_CHANGED, user_id, dict(message)),
            )
        return summary

    async def message_seen(
        self,
        participants: Iterable[Any],
        message: Mapping[str, Any],
    ) -> NotificationSummary:
        """Announce that a message was read.

        Every participant gets a status change; the original sender also
        gets the message again on its received topic, which older clients
        use to refresh read receipts.
        """
        summary = await self.message_status_changed(participants, message)
        sender = message.get("sender_id")
        if sender is not None and str(sender).strip():
            summary.results.append(
                await self._publish(TopicKind.MESSAGE_RECEIVED, sender, dict(message)),
            )
        return summary

    async def user_chats_updated(
        self,
        user_id: int | str,
        chats: Iterable[Mapping[str, Any]],
    ) -> NotificationSummary:
        """Publish one chat-list update per chat to ``user_id``."""
        summary = NotificationSummary()
        for chat in chats:
            summary.results.append(
                await self._publish(TopicKind.CHAT_LIST_UPDATED, user_id, normalize_chat(chat)),
            )
        logger.debug(
            "Chat list update published",
            extra={"subject_id": str(user_id), "chats": summary.published},
        )
        return summary

    async def _publish(
        self,
        kind: TopicKind,
        user_id: int | str,
        body: dict[str, Any],
    ) -> PublishResult:
        topic = topic_for(kind, user_id)
        return await self._publisher.publish(topic, {kind.payload_key: body})


__all__ = ["ChatNotifier", "NotificationSummary"]
