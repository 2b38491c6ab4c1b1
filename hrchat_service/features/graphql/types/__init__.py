"""GraphQL type definitions.

This package contains Strawberry types for:
- Chat events (Message, Chat and their nested types)
- Fan-out introspection (PubSubStats, TopicKind)
"""

from __future__ import annotations

from hrchat_service.features.graphql.types.chat import (
    ChatLastMessageType,
    ChatParticipantType,
    ChatType,
    MessageReadType,
    MessageSenderType,
    MessageType,
)
from hrchat_service.features.graphql.types.pubsub import (
    PubSubStatsType,
    SessionsByKindType,
    TopicKindEnum,
)

__all__ = [
    "ChatLastMessageType",
    "ChatParticipantType",
    "ChatType",
    "MessageReadType",
    "MessageSenderType",
    "MessageType",
    "PubSubStatsType",
    "SessionsByKindType",
    "TopicKindEnum",
]
