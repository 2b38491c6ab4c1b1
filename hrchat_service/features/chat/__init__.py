"""Chat notifications: the producer side of real-time chat events."""

from hrchat_service.features.chat.notifier import ChatNotifier, NotificationSummary
from hrchat_service.features.chat.payloads import (
    normalize_chat,
    normalize_last_message,
    normalize_participants,
    participant_ids,
)

__all__ = [
    "ChatNotifier",
    "NotificationSummary",
    "normalize_chat",
    "normalize_last_message",
    "normalize_participants",
    "participant_ids",
]
