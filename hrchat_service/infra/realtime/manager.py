"""Subscription session manager: open and close sessions.

``open`` authenticates a credential through the token validator, derives the
subscriber's topic, registers the session and makes it ACTIVE. ``close`` is
idempotent and may be triggered from several places at once (client
disconnect, explicit unsubscribe, a failed write); the first caller wins and
the rest are no-ops.

Example:
    manager = SessionManager(registry, validator, queue_capacity=100)

    session = manager.open(user_token, TopicKind.MESSAGE_RECEIVED)
    try:
        async for payload in session.dispatcher.events():
            ...
    finally:
        manager.close(session, "unsubscribe")
"""

from __future__ import annotations

import asyncio
from collections import Counter
from contextlib import aclosing, asynccontextmanager, suppress
from dataclasses import dataclass, field
import logging
import threading
from typing import TYPE_CHECKING, Any

from hrchat_service.core.exceptions import AuthError, SubscriptionLimitError
from hrchat_service.infra.metrics.prometheus import (
    pubsub_active_sessions,
    pubsub_auth_failures_total,
)
from hrchat_service.infra.realtime.dispatcher import DeliveryDispatcher, Serializer
from hrchat_service.infra.realtime.session import SessionState, SubscriptionSession
from hrchat_service.infra.realtime.topics import TopicKind, topic_for

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from hrchat_service.infra.auth.tokens import TokenValidator
    from hrchat_service.infra.realtime.registry import ChannelRegistry

logger = logging.getLogger(__name__)

SUBSCRIPTION_AUTH_ERROR = "AuthError: invalid user token for subscription"


@dataclass(frozen=True, slots=True)
class SessionStats:
    """Point-in-time view of live sessions."""

    active_sessions: int
    topics: int
    lossy_sessions: int
    dropped_events: int
    sessions_by_kind: dict[str, int] = field(default_factory=dict)


class SessionManager:
    """Creates, tracks and closes subscription sessions.

    Args:
        registry: Channel registry sessions are routed through.
        validator: Identity/token validator collaborator.
        queue_capacity: Per-session queue size (drop-oldest beyond it).
        max_sessions_per_user: Live sessions allowed per subject (0 = unlimited).
        serializer: Serializer handed to each session's dispatcher.
    """

    def __init__(
        self,
        registry: ChannelRegistry,
        validator: TokenValidator,
        *,
        queue_capacity: int = 100,
        max_sessions_per_user: int = 0,
        serializer: Serializer | None = None,
    ) -> None:
        self._registry = registry
        self._validator = validator
        self._queue_capacity = queue_capacity
        self._max_sessions_per_user = max_sessions_per_user
        self._serializer = serializer
        self._sessions: dict[str, SubscriptionSession] = {}
        self._lock = threading.RLock()

    @property
    def registry(self) -> ChannelRegistry:
        return self._registry

    def open(
        self,
        credential: str | None,
        kind: TopicKind | str,
        *,
        serializer: Serializer | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> SubscriptionSession:
        """Authenticate ``credential`` and open an ACTIVE session on ``kind``.

        Raises:
            AuthError: The validator rejected the credential.
            SubscriptionLimitError: The subject already holds the maximum
                number of live sessions.
            ValueError: ``kind`` is not a known topic kind.
        """
        kind = TopicKind.parse(kind)
        session = SubscriptionSession(kind=kind, metadata=metadata or {})

        identity = self._validator.validate(credential)
        if identity is None:
            session.state = SessionState.CLOSED
            session.close_reason = "auth-failed"
            pubsub_auth_failures_total.inc()
            logger.info(
                "Subscription rejected: invalid credential",
                extra={"session_id": session.session_id, "kind": kind.value},
            )
            raise AuthError(SUBSCRIPTION_AUTH_ERROR, extra={"kind": kind.value})

        session.subject_id = identity.subject_id
        session.topic = topic_for(kind, identity.subject_id)
        session.dispatcher = DeliveryDispatcher(
            session,
            self._queue_capacity,
            serializer=serializer or self._serializer,
            on_terminate=self.close,
        )

        with self._lock:
            if self._max_sessions_per_user and (
                self._count_for(identity.subject_id) >= self._max_sessions_per_user
            ):
                session.state = SessionState.CLOSED
                session.close_reason = "limit-reached"
                raise SubscriptionLimitError(identity.subject_id, self._max_sessions_per_user)

            self._sessions[session.session_id] = session
            # ACTIVE before registering so the first routed publish is accepted
            session.state = SessionState.ACTIVE
            self._registry.register(session.topic, session)

        pubsub_active_sessions.labels(kind=kind.prefix).inc()
        logger.info("Subscription opened", extra=session.describe())
        return session

    def close(self, session: SubscriptionSession, reason: str = "closed") -> None:
        """Close ``session``. Idempotent and callable from any task or thread.

        The session is deregistered before anything else, so no publish that
        starts after this call can route to it. A write already in progress
        may finish; the session becomes CLOSED once it has.
        """
        with self._lock:
            if session.state in (SessionState.DRAINING, SessionState.CLOSED):
                return
            was_active = session.state is SessionState.ACTIVE
            if session.topic is not None:
                self._registry.deregister(session.topic, session)
            self._sessions.pop(session.session_id, None)
            session.state = SessionState.DRAINING
            session.close_reason = reason

        if was_active:
            pubsub_active_sessions.labels(kind=session.kind.prefix).dec()
            logger.info("Subscription closing", extra={**session.describe(), "reason": reason})

        if session.dispatcher is not None:
            session.dispatcher.stop()
        else:
            session.state = SessionState.CLOSED

    @asynccontextmanager
    async def session(
        self,
        credential: str | None,
        kind: TopicKind | str,
        **kwargs: Any,
    ) -> AsyncIterator[SubscriptionSession]:
        """Open a session for the duration of an ``async with`` block."""
        session = self.open(credential, kind, **kwargs)
        try:
            yield session
        finally:
            self.close(session, "unsubscribe")

    async def stream(self, credential: str | None, kind: TopicKind | str) -> AsyncIterator[Any]:
        """Open a session and iterate its payloads (pull mode).

        Authentication happens before the first payload is requested, so an
        invalid credential fails the subscription itself.
        """
        session = self.open(credential, kind)
        try:
            async with aclosing(session.dispatcher.events()) as events:
                async for payload in events:
                    yield payload
        finally:
            self.close(session, "unsubscribe")

    def get(self, session_id: str) -> SubscriptionSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def sessions(self) -> tuple[SubscriptionSession, ...]:
        with self._lock:
            return tuple(self._sessions.values())

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def stats(self) -> SessionStats:
        sessions = self.sessions()
        by_kind = Counter(s.kind.value for s in sessions)
        return SessionStats(
            active_sessions=len(sessions),
            topics=self._registry.topic_count,
            lossy_sessions=sum(1 for s in sessions if s.lossy),
            dropped_events=sum(s.dropped for s in sessions),
            sessions_by_kind=dict(by_kind),
        )

    async def shutdown(self, timeout: float = 5.0) -> None:
        """Close every live session and wait for in-flight writes."""
        sessions = self.sessions()
        for session in sessions:
            self.close(session, "shutdown")

        if sessions:
            with suppress(TimeoutError):
                await asyncio.wait_for(
                    asyncio.gather(*(s.wait_closed() for s in sessions)),
                    timeout=timeout,
                )
        logger.info("Session manager stopped", extra={"sessions_closed": len(sessions)})

    def _count_for(self, subject_id: str) -> int:
        return sum(1 for s in self._sessions.values() if s.subject_id == subject_id)


__all__ = ["SUBSCRIPTION_AUTH_ERROR", "SessionManager", "SessionStats"]
