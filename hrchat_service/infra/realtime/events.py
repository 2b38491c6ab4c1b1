"""Value types routed by the fan-out core."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import time
from typing import Any


@dataclass(frozen=True, slots=True)
class Event:
    """An immutable (topic, payload, enqueue-time) triple.

    The payload belongs to the producer; the core only routes it.
    ``enqueued_at`` is a ``time.monotonic()`` reading taken at publish time.
    """

    topic: str
    payload: Any
    enqueued_at: float = field(default_factory=time.monotonic)

    @property
    def age(self) -> float:
        """Seconds since the event was published."""
        return time.monotonic() - self.enqueued_at


class EnqueueOutcome(StrEnum):
    """Result of handing one event to one session."""

    ACCEPTED = "accepted"
    # Accepted, but the queue was full and its oldest event was discarded
    DROPPED_OLDEST = "dropped_oldest"
    # Session is not ACTIVE; the event was not queued
    REJECTED = "rejected"


__all__ = ["EnqueueOutcome", "Event"]
