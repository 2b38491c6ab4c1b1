"""In-process event fan-out for real-time subscriptions.

Producers publish (topic, payload) pairs through a :class:`Publisher`;
subscribers hold a :class:`SubscriptionSession` opened by the
:class:`SessionManager`. Each session's :class:`DeliveryDispatcher` isolates
its subscriber so a slow or broken client never delays anyone else.
"""

from hrchat_service.infra.realtime.dispatcher import DeliveryDispatcher, Sink, json_serializer
from hrchat_service.infra.realtime.events import EnqueueOutcome, Event
from hrchat_service.infra.realtime.manager import (
    SUBSCRIPTION_AUTH_ERROR,
    SessionManager,
    SessionStats,
)
from hrchat_service.infra.realtime.publisher import (
    EventPublisher,
    InstrumentedPublisher,
    PublishResult,
    Publisher,
)
from hrchat_service.infra.realtime.registry import ChannelRegistry
from hrchat_service.infra.realtime.session import SessionState, SubscriptionSession
from hrchat_service.infra.realtime.topics import TopicKind, kind_label, parse_topic, topic_for

__all__ = [
    "SUBSCRIPTION_AUTH_ERROR",
    "ChannelRegistry",
    "DeliveryDispatcher",
    "EnqueueOutcome",
    "Event",
    "EventPublisher",
    "InstrumentedPublisher",
    "PublishResult",
    "Publisher",
    "SessionManager",
    "SessionState",
    "SessionStats",
    "Sink",
    "SubscriptionSession",
    "TopicKind",
    "json_serializer",
    "kind_label",
    "parse_topic",
    "topic_for",
]
