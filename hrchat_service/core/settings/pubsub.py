"""Publish/subscribe fan-out settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PubSubSettings(BaseSettings):
    """Event fan-out and subscription session settings.

    Environment variables use PUBSUB_ prefix.
    Example: PUBSUB_QUEUE_CAPACITY=100
    """

    # ──────────────────────────────────────────────────────────────
    # Back-pressure
    # ──────────────────────────────────────────────────────────────

    queue_capacity: int = Field(
        default=100,
        ge=1,
        le=100_000,
        description="Pending events held per session before the oldest is dropped",
    )

    # ──────────────────────────────────────────────────────────────
    # Session limits
    # ──────────────────────────────────────────────────────────────

    max_sessions_per_user: int = Field(
        default=0,
        ge=0,
        le=1000,
        description="Maximum live sessions per subscriber identity (0 to disable)",
    )

    # ──────────────────────────────────────────────────────────────
    # Serialization
    # ──────────────────────────────────────────────────────────────

    ensure_ascii: bool = Field(
        default=False,
        description="Escape non-ASCII characters when serializing event payloads",
    )

    # ──────────────────────────────────────────────────────────────
    # Observability
    # ──────────────────────────────────────────────────────────────

    log_publishes: bool = Field(
        default=True,
        description="Log every publish call at DEBUG level",
    )

    model_config = SettingsConfigDict(
        env_prefix="PUBSUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
