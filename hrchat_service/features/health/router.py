"""Health check API endpoints.

Provides Kubernetes-ready health check endpoints for:
- Liveness probes: /health/live - Is the process alive?
- Readiness probes: /health/ready - Is the fan-out core initialized?
- Overall health: /health - Service identity and live session count
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Request, Response, status

from hrchat_service.core.settings import get_app_settings
from hrchat_service.features.health.schemas import (
    HealthResponse,
    LivenessResponse,
    ReadinessResponse,
)

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthResponse,
    summary="Overall health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """Report service identity and whether the fan-out core is running."""
    settings = getattr(request.app.state, "app_settings", None) or get_app_settings()
    manager = getattr(request.app.state, "session_manager", None)
    healthy = manager is not None
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        service=settings.service_name,
        version=settings.version,
        environment=settings.environment,
        active_sessions=manager.active_count if manager is not None else 0,
        timestamp=datetime.now(UTC),
    )


@router.get("/live", response_model=LivenessResponse, summary="Liveness probe")
async def liveness() -> LivenessResponse:
    return LivenessResponse(timestamp=datetime.now(UTC))


@router.get("/ready", response_model=ReadinessResponse, summary="Readiness probe")
async def readiness(request: Request, response: Response) -> ReadinessResponse:
    ready = getattr(request.app.state, "session_manager", None) is not None
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(ready=ready, timestamp=datetime.now(UTC))
