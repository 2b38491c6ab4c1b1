"""Subscription session state.

A session binds one authenticated subscriber to one topic. Its lifecycle is::

    PENDING ──validated──► ACTIVE ──disconnect / unsubscribe / write error──► DRAINING ──idle──► CLOSED
       └──────────────────── validation failed ────────────────────────────────────────────────►┘

Sessions are created and closed by :class:`~hrchat_service.infra.realtime.manager.SessionManager`;
the channel registry only holds a routing reference to them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import time
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from hrchat_service.infra.realtime.events import EnqueueOutcome

if TYPE_CHECKING:
    from hrchat_service.infra.realtime.dispatcher import DeliveryDispatcher
    from hrchat_service.infra.realtime.events import Event
    from hrchat_service.infra.realtime.topics import TopicKind


class SessionState(StrEnum):
    """Lifecycle states of a subscription session."""

    PENDING = "pending"
    ACTIVE = "active"
    DRAINING = "draining"
    CLOSED = "closed"


@dataclass(eq=False)
class SubscriptionSession:
    """One live subscriber bound to a topic.

    Attributes:
        kind: Event kind the subscriber asked for.
        session_id: Unique id, used as the registry key.
        subject_id: Identity returned by the token validator (set on activation).
        topic: Topic derived from ``kind`` and ``subject_id`` (set on activation).
        state: Current lifecycle state.
        lossy: True once the session has dropped an event on overflow.
        dropped: Number of events dropped on overflow.
        delivered: Number of events written to the transport.
        close_reason: Why the session left ACTIVE, if it has.
    """

    kind: TopicKind
    session_id: str = field(default_factory=lambda: str(uuid4()))
    subject_id: str | None = None
    topic: str | None = None
    state: SessionState = SessionState.PENDING
    opened_at: float = field(default_factory=time.time)
    lossy: bool = False
    dropped: int = 0
    delivered: int = 0
    close_reason: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    dispatcher: DeliveryDispatcher | None = field(default=None, repr=False)

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def is_closed(self) -> bool:
        return self.state is SessionState.CLOSED

    def enqueue(self, event: Event) -> EnqueueOutcome:
        """Hand ``event`` to this session's dispatcher."""
        if self.dispatcher is None:
            return EnqueueOutcome.REJECTED
        return self.dispatcher.enqueue(event)

    async def wait_closed(self) -> None:
        """Wait until the session reaches CLOSED."""
        if self.dispatcher is not None:
            await self.dispatcher.wait_closed()

    def describe(self) -> dict[str, Any]:
        """Loggable summary of the session."""
        return {
            "session_id": self.session_id,
            "subject_id": self.subject_id,
            "topic": self.topic,
            "state": self.state.value,
            "lossy": self.lossy,
            "dropped": self.dropped,
            "delivered": self.delivered,
        }


__all__ = ["SessionState", "SubscriptionSession"]
