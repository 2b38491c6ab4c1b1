"""Prometheus metrics endpoint for observability.

Endpoints:
    GET /metrics - Prometheus scrape endpoint

Metrics Exposed:
    Fan-out Metrics:
        - pubsub_events_published_total - Publish calls by topic kind
        - pubsub_deliveries_total - Events written to subscriber transports
        - pubsub_overflow_drops_total - Events dropped by full session queues
        - pubsub_delivery_failures_total - Write failures that closed a session
        - pubsub_unrouted_events_total - Events published with no subscriber
        - pubsub_active_sessions - Live subscription sessions
        - pubsub_auth_failures_total - Rejected subscription attempts

    Application Info:
        - application_info - Service version, name, and environment labels
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from hrchat_service.infra.metrics.prometheus import REGISTRY

router = APIRouter(tags=["observability"])


@router.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics in text exposition format.

    Returns:
        Response with Prometheus metrics.
    """
    data = generate_latest(REGISTRY)
    return Response(
        content=data,
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
