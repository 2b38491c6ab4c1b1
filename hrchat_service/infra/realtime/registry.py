"""Channel registry: the authoritative topic -> live sessions map."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hrchat_service.infra.realtime.session import SubscriptionSession


class ChannelRegistry:
    """Maps each topic to the sessions currently subscribed to it.

    Topics are created lazily on first registration and pruned when their
    last session leaves. Publishers read a snapshot through
    :meth:`subscribers_of`, so registrations racing with a fan-out never
    corrupt the iteration or make a session appear twice.

    The lock is a plain ``threading.RLock``: producers may run in worker
    threads (sync FastAPI endpoints) as well as on the event loop, and no
    critical section awaits.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        # topic -> {session_id: session}; dicts keep registration order
        self._topics: dict[str, dict[str, SubscriptionSession]] = {}

    def register(self, topic: str, session: SubscriptionSession) -> None:
        """Add ``session`` to ``topic``. Registering twice is a no-op."""
        with self._lock:
            self._topics.setdefault(topic, {}).setdefault(session.session_id, session)

    def deregister(self, topic: str, session: SubscriptionSession) -> None:
        """Remove ``session`` from ``topic``. Unknown pairs are ignored."""
        with self._lock:
            sessions = self._topics.get(topic)
            if not sessions:
                return
            sessions.pop(session.session_id, None)
            if not sessions:
                del self._topics[topic]

    def subscribers_of(self, topic: str) -> tuple[SubscriptionSession, ...]:
        """Point-in-time snapshot of the sessions on ``topic``."""
        with self._lock:
            sessions = self._topics.get(topic)
            return tuple(sessions.values()) if sessions else ()

    def is_registered(self, topic: str, session: SubscriptionSession) -> bool:
        with self._lock:
            return session.session_id in self._topics.get(topic, {})

    def topics(self) -> tuple[str, ...]:
        """Snapshot of topics that currently have subscribers."""
        with self._lock:
            return tuple(self._topics)

    @property
    def topic_count(self) -> int:
        with self._lock:
            return len(self._topics)

    @property
    def session_count(self) -> int:
        """Number of (topic, session) registrations."""
        with self._lock:
            return sum(len(sessions) for sessions in self._topics.values())

    def clear(self) -> None:
        with self._lock:
            self._topics.clear()


__all__ = ["ChannelRegistry"]
