"""Publisher: the single entry point producers use to announce events.

``Publisher.publish`` snapshots the topic's subscribers and hands the event
to each session's dispatcher. Hand-off is a non-blocking enqueue, so a
publish returns as soon as every live subscriber has the event queued; it
never waits for a transport write and never raises because of a subscriber.

Logging and metrics are layered on with :class:`InstrumentedPublisher`
rather than patched into the publisher itself:

    publisher = InstrumentedPublisher(Publisher(registry))
    await publisher.publish(topic_for(TopicKind.MESSAGE_RECEIVED, 42), {"messageReceived": msg})
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any, Protocol

from hrchat_service.infra.metrics.prometheus import (
    pubsub_events_published_total,
    pubsub_unrouted_events_total,
)
from hrchat_service.infra.realtime.events import EnqueueOutcome, Event
from hrchat_service.infra.realtime.topics import kind_label

if TYPE_CHECKING:
    from hrchat_service.infra.realtime.registry import ChannelRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PublishResult:
    """Outcome of one publish call.

    Attributes:
        topic: Topic the event was published to.
        subscribers: Sessions in the snapshot taken at publish time.
        accepted: Sessions that queued the event.
        dropped: Of ``accepted``, sessions that discarded an older event to make room.
        failed: Sessions that rejected the event or raised during hand-off.
    """

    topic: str
    subscribers: int = 0
    accepted: int = 0
    dropped: int = 0
    failed: int = 0

    @property
    def routed(self) -> bool:
        """True when at least one subscriber queued the event."""
        return self.accepted > 0


class EventPublisher(Protocol):
    """Anything producers can publish through."""

    async def publish(self, topic: str, payload: Any) -> PublishResult: ...


class Publisher:
    """Fans events out to the sessions registered on their topic."""

    def __init__(self, registry: ChannelRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ChannelRegistry:
        return self._registry

    async def publish(self, topic: str, payload: Any) -> PublishResult:
        """Publish ``payload`` on ``topic``.

        Events published in sequence by one caller reach each subscriber's
        queue in that sequence. With no subscriber the event is dropped.
        """
        return self.publish_nowait(topic, payload)

    def publish_nowait(self, topic: str, payload: Any) -> PublishResult:
        """Synchronous variant of :meth:`publish` for worker-thread producers."""
        event = Event(topic=topic, payload=payload)
        sessions = self._registry.subscribers_of(topic)

        accepted = dropped = failed = 0
        for session in sessions:
            try:
                outcome = session.enqueue(event)
            except Exception:
                # One broken session must not stop the fan-out
                failed += 1
                logger.exception(
                    "Hand-off to session failed",
                    extra={"topic": topic, "session_id": session.session_id},
                )
                continue

            if outcome is EnqueueOutcome.REJECTED:
                failed += 1
            else:
                accepted += 1
                if outcome is EnqueueOutcome.DROPPED_OLDEST:
                    dropped += 1

        return PublishResult(
            topic=topic,
            subscribers=len(sessions),
            accepted=accepted,
            dropped=dropped,
            failed=failed,
        )


class InstrumentedPublisher:
    """Wraps a publisher with logging and Prometheus counters."""

    def __init__(self, inner: EventPublisher, *, log_publishes: bool = True) -> None:
        self._inner = inner
        self._log_publishes = log_publishes

    @property
    def inner(self) -> EventPublisher:
        return self._inner

    async def publish(self, topic: str, payload: Any) -> PublishResult:
        label = kind_label(topic)
        pubsub_events_published_total.labels(kind=label).inc()

        result = await self._inner.publish(topic, payload)

        if result.subscribers == 0:
            pubsub_unrouted_events_total.labels(kind=label).inc()

        if self._log_publishes:
            logger.debug(
                "PubSub publish",
                extra={
                    "topic": topic,
                    "payload_type": _payload_type(payload),
                    "subscribers": result.subscribers,
                    "accepted": result.accepted,
                    "dropped": result.dropped,
                    "failed": result.failed,
                },
            )
        return result


def _payload_type(payload: Any) -> str:
    """First key of a dict payload (e.g. ``messageReceived``), else the type name."""
    if isinstance(payload, dict) and payload:
        return str(next(iter(payload)))
    return type(payload).__name__


__all__ = ["EventPublisher", "InstrumentedPublisher", "PublishResult", "Publisher"]
