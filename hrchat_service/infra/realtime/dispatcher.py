"""Per-session delivery dispatcher.

Each active session owns one dispatcher: a bounded queue of pending events
plus the loop that moves them onto the session's transport. The publisher
only ever calls :meth:`DeliveryDispatcher.enqueue`, which never blocks and
never raises, so a slow or broken subscriber cannot hold up a producer or
any other subscriber.

Back-pressure: when the queue is full the *oldest* queued event is dropped
and the session is flagged ``lossy``. Chat clients care about the latest
state, so losing stale updates is preferable to unbounded memory.

Two drive modes share the queue and state handling:

- push, :meth:`DeliveryDispatcher.run`: serialize each event and await
  ``sink.send(data)``; used by the plain WebSocket endpoint.
- pull, :meth:`DeliveryDispatcher.events`: an async iterator of payloads;
  used by GraphQL subscriptions, where the framework performs the
  transport write between two iterations.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable
import json
import logging
import threading
from typing import TYPE_CHECKING, Any, Protocol

from hrchat_service.core.exceptions import DeliveryFailure
from hrchat_service.infra.metrics.prometheus import (
    pubsub_deliveries_total,
    pubsub_delivery_failures_total,
    pubsub_overflow_drops_total,
)
from hrchat_service.infra.realtime.events import EnqueueOutcome, Event
from hrchat_service.infra.realtime.session import SessionState
from hrchat_service.infra.realtime.topics import kind_label

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from hrchat_service.infra.realtime.session import SubscriptionSession

logger = logging.getLogger(__name__)

Serializer = Callable[[Event], str]
TerminateCallback = Callable[["SubscriptionSession", str], None]


class Sink(Protocol):
    """Outbound transport for one session."""

    async def send(self, data: str) -> None:
        """Write one serialized event. Any exception is a delivery failure."""
        ...


def json_serializer(event: Event, *, ensure_ascii: bool = False) -> str:
    """Serialize the event payload as JSON."""
    return json.dumps(event.payload, ensure_ascii=ensure_ascii, default=str)


class DeliveryDispatcher:
    """Bounded event queue and delivery loop for one session.

    Args:
        session: The session this dispatcher delivers for.
        capacity: Maximum number of queued events before drop-oldest applies.
        serializer: Turns an event into the string written by ``run``.
        on_terminate: Called with ``(session, reason)`` when the dispatcher
            itself decides the session must end (write failure, consumer
            gone). The session manager passes its ``close`` here so that
            deregistration always happens in one place.
    """

    def __init__(
        self,
        session: SubscriptionSession,
        capacity: int,
        *,
        serializer: Serializer | None = None,
        on_terminate: TerminateCallback | None = None,
    ) -> None:
        if capacity < 1:
            msg = f"Queue capacity must be at least 1, got {capacity}"
            raise ValueError(msg)

        self._session = session
        self._capacity = capacity
        self._serializer = serializer or json_serializer
        self._on_terminate = on_terminate
        self._label = kind_label(session.topic or "")

        self._queue: deque[Event] = deque()
        self._lock = threading.Lock()
        self._ready = asyncio.Event()
        self._closed = asyncio.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._bind_loop()

        self._in_flight = False
        self._stopping = False
        self._finished = False

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def enqueue(self, event: Event) -> EnqueueOutcome:
        """Queue ``event`` for delivery without blocking.

        Returns:
            ACCEPTED, DROPPED_OLDEST when a full queue lost its oldest
            event to make room, or REJECTED when the session is no longer
            accepting events.
        """
        session = self._session
        if session.state is not SessionState.ACTIVE:
            return EnqueueOutcome.REJECTED

        with self._lock:
            if self._stopping:
                return EnqueueOutcome.REJECTED
            outcome = EnqueueOutcome.ACCEPTED
            if len(self._queue) >= self._capacity:
                self._queue.popleft()
                session.dropped += 1
                outcome = EnqueueOutcome.DROPPED_OLDEST
            self._queue.append(event)

        if outcome is EnqueueOutcome.DROPPED_OLDEST:
            pubsub_overflow_drops_total.labels(kind=self._label).inc()
            if not session.lossy:
                session.lossy = True
                logger.warning(
                    "Session queue overflowed, dropping oldest events",
                    extra={
                        "session_id": session.session_id,
                        "topic": session.topic,
                        "capacity": self._capacity,
                    },
                )

        self._signal(self._ready)
        return outcome

    # ------------------------------------------------------------------
    # Delivery loops
    # ------------------------------------------------------------------

    async def run(self, sink: Sink) -> None:
        """Push queued events to ``sink`` until the session closes.

        A failed write is contained here: it is logged, counted and closes
        this session. It never propagates to the caller.
        """
        self._bind_loop()
        session = self._session
        try:
            while True:
                event = await self._next()
                if event is None:
                    break

                try:
                    data = self._serializer(event)
                except (TypeError, ValueError):
                    logger.exception(
                        "Dropping event that could not be serialized",
                        extra={"session_id": session.session_id, "topic": event.topic},
                    )
                    self._release()
                    continue

                try:
                    await sink.send(data)
                except Exception as exc:
                    failure = DeliveryFailure(session.session_id, exc)
                    pubsub_delivery_failures_total.labels(kind=self._label).inc()
                    logger.warning(
                        "Delivery failed, closing session",
                        extra={
                            "session_id": session.session_id,
                            "topic": session.topic,
                            "error": str(failure),
                        },
                    )
                    self._release()
                    self._terminate("delivery-failure")
                    break

                self._record_delivery()
                self._release()
        finally:
            # Also covers cancellation in the middle of a write
            self._terminate("dispatcher-exit")
            self._release()

    async def events(self) -> AsyncIterator[Any]:
        """Yield queued payloads until the session closes.

        The consumer's work between two iterations counts as the in-flight
        write. Closing the iterator (client gone) closes the session.
        """
        self._bind_loop()
        try:
            while True:
                event = await self._next()
                if event is None:
                    return
                try:
                    yield event.payload
                finally:
                    self._release()
                self._record_delivery()
        finally:
            self._terminate("consumer-finished")
            self._release()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def stop(self) -> None:
        """Stop accepting and starting deliveries.

        Queued events are discarded. A write already in progress is allowed
        to finish or fail; the session reaches CLOSED when it does, or
        immediately when nothing is in flight. Safe to call more than once
        and from any thread.
        """
        with self._lock:
            if self._stopping:
                return
            self._stopping = True
            discarded = len(self._queue)
            self._queue.clear()
            idle = not self._in_flight

        if discarded:
            logger.debug(
                "Discarded queued events on close",
                extra={"session_id": self._session.session_id, "discarded": discarded},
            )

        self._signal(self._ready)
        if idle:
            self._finish()

    async def wait_closed(self) -> None:
        await self._closed.wait()

    @property
    def pending(self) -> int:
        """Number of queued, not yet started events."""
        with self._lock:
            return len(self._queue)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def capacity(self) -> int:
        return self._capacity

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _next(self) -> Event | None:
        """Wait for the next event; None once stopping."""
        while True:
            with self._lock:
                if self._stopping:
                    return None
                if self._queue:
                    self._in_flight = True
                    return self._queue.popleft()
                self._ready.clear()
            await self._ready.wait()

    def _release(self) -> None:
        """Mark the current write as finished."""
        with self._lock:
            self._in_flight = False
            stopping = self._stopping
        if stopping:
            self._finish()

    def _record_delivery(self) -> None:
        self._session.delivered += 1
        pubsub_deliveries_total.labels(kind=self._label).inc()

    def _terminate(self, reason: str) -> None:
        if self._on_terminate is not None:
            self._on_terminate(self._session, reason)
        else:
            self.stop()

    def _finish(self) -> None:
        with self._lock:
            if self._finished:
                return
            self._finished = True
        self._session.state = SessionState.CLOSED
        self._signal(self._closed)

    def _bind_loop(self) -> None:
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            pass

    def _signal(self, flag: asyncio.Event) -> None:
        """Set an asyncio.Event from whichever thread we are on."""
        loop = self._loop
        if loop is None:
            flag.set()
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            flag.set()
            return
        try:
            loop.call_soon_threadsafe(flag.set)
        except RuntimeError:
            # Loop already closed; nobody is waiting any more
            flag.set()


__all__ = ["DeliveryDispatcher", "Serializer", "Sink", "json_serializer"]
