"""Topic naming: the addressing contract between producers and subscribers.

A topic is ``<prefix>_<subject id>``. Producers and the subscribe path must
build it from the same (kind, subject id) pair, so every topic string in the
service is produced by :func:`topic_for` and nothing else.

    >>> topic_for(TopicKind.MESSAGE_RECEIVED, 42)
    'message_received_42'
"""

from __future__ import annotations

from enum import StrEnum


class TopicKind(StrEnum):
    """Event kinds a client can subscribe to.

    The enum value is the public name used in APIs; ``prefix`` is the
    topic prefix on the wire.
    """

    MESSAGE_RECEIVED = "message-received"
    MESSAGE_STATUS_CHANGED = "message-status-changed"
    CHAT_LIST_UPDATED = "chat-list-updated"

    @property
    def prefix(self) -> str:
        return _PREFIXES[self]

    @property
    def payload_key(self) -> str:
        """Key under which producers place the event body."""
        return _PAYLOAD_KEYS[self]

    @classmethod
    def parse(cls, value: str | TopicKind) -> TopicKind:
        """Accept either the public name or the wire prefix.

        Raises:
            ValueError: If ``value`` names no known kind.
        """
        if isinstance(value, TopicKind):
            return value
        normalized = value.strip().lower()
        for kind in cls:
            if normalized in (kind.value, kind.prefix, kind.name.lower()):
                return kind
        msg = f"Unknown topic kind: {value!r}"
        raise ValueError(msg)


_PREFIXES: dict[TopicKind, str] = {
    TopicKind.MESSAGE_RECEIVED: "message_received",
    TopicKind.MESSAGE_STATUS_CHANGED: "message_status_changed",
    TopicKind.CHAT_LIST_UPDATED: "user_chats_updated",
}

_PAYLOAD_KEYS: dict[TopicKind, str] = {
    TopicKind.MESSAGE_RECEIVED: "messageReceived",
    TopicKind.MESSAGE_STATUS_CHANGED: "messageStatusChanged",
    TopicKind.CHAT_LIST_UPDATED: "userChatsUpdated",
}


def topic_for(kind: TopicKind | str, subject_id: int | str) -> str:
    """Build the topic for ``kind`` addressed to ``subject_id``.

    Integer and numeric-string ids of the same subject give the same topic.

    Raises:
        ValueError: If the kind is unknown or the subject id is empty.
    """
    kind = TopicKind.parse(kind)
    if subject_id is None or isinstance(subject_id, bool):
        msg = f"Invalid subject id: {subject_id!r}"
        raise ValueError(msg)
    subject = str(subject_id).strip()
    if not subject:
        msg = "Subject id must not be empty"
        raise ValueError(msg)
    return f"{kind.prefix}_{subject}"


def parse_topic(topic: str) -> tuple[TopicKind | None, str]:
    """Split a topic into its kind and subject id.

    Unknown prefixes return ``(None, topic)``. Used for metric labels and
    logging only; routing always compares full topic strings.
    """
    # Longest prefix first: "message_status_changed" must not match "message_"
    for kind in sorted(TopicKind, key=lambda k: len(k.prefix), reverse=True):
        head = f"{kind.prefix}_"
        if topic.startswith(head) and len(topic) > len(head):
            return kind, topic[len(head) :]
    return None, topic


def kind_label(topic: str) -> str:
    """Metric label for a topic: the kind's prefix or ``other``."""
    kind, _ = parse_topic(topic)
    return kind.prefix if kind is not None else "other"


__all__ = ["TopicKind", "kind_label", "parse_topic", "topic_for"]
