"""Prometheus metrics for the event fan-out core."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Info

# Custom registry so tests and multiple app instances do not collide with
# the process-wide default registry.
REGISTRY = CollectorRegistry()

# Labels use the topic kind, never the full topic: one topic per user would
# make the series count unbounded.

pubsub_events_published_total = Counter(
    "pubsub_events_published_total",
    "Total publish calls received from producers",
    ["kind"],
    registry=REGISTRY,
)

pubsub_deliveries_total = Counter(
    "pubsub_deliveries_total",
    "Events written to a subscriber transport",
    ["kind"],
    registry=REGISTRY,
)

pubsub_overflow_drops_total = Counter(
    "pubsub_overflow_drops_total",
    "Queued events dropped because a session queue was full (drop-oldest)",
    ["kind"],
    registry=REGISTRY,
)

pubsub_delivery_failures_total = Counter(
    "pubsub_delivery_failures_total",
    "Transport write failures that closed a session",
    ["kind"],
    registry=REGISTRY,
)

pubsub_unrouted_events_total = Counter(
    "pubsub_unrouted_events_total",
    "Events published to a topic with no active subscriber",
    ["kind"],
    registry=REGISTRY,
)

pubsub_active_sessions = Gauge(
    "pubsub_active_sessions",
    "Subscription sessions currently registered",
    ["kind"],
    registry=REGISTRY,
)

pubsub_auth_failures_total = Counter(
    "pubsub_auth_failures_total",
    "Subscription attempts rejected by the token validator",
    registry=REGISTRY,
)

application_info = Info(
    "application",
    "Application version and environment",
    registry=REGISTRY,
)
