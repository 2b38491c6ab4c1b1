"""Health check response models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class LivenessResponse(BaseModel):
    """Liveness probe response."""

    status: Literal["alive"] = "alive"
    timestamp: datetime = Field(..., description="Check timestamp (UTC)")


class ReadinessResponse(BaseModel):
    """Readiness probe response."""

    ready: bool = Field(..., description="Whether the fan-out core is initialized")
    timestamp: datetime = Field(..., description="Check timestamp (UTC)")


class HealthResponse(BaseModel):
    """Overall service health."""

    status: Literal["healthy", "unhealthy"]
    service: str
    version: str
    environment: str
    active_sessions: int = Field(default=0, ge=0)
    timestamp: datetime = Field(..., description="Check timestamp (UTC)")
