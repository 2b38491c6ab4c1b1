"""Application lifespan management.

Startup Order:
1. Core (logging, application info metric)
2. Realtime (channel registry, token validator, session manager, publisher)

Shutdown Order: Reverse of startup. Live subscription sessions are closed
and given a short grace period for in-flight writes.

The realtime core lives on ``app.state`` rather than in module globals, so
several applications (tests, embedded use) never share subscribers.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from functools import partial
import logging
from typing import TYPE_CHECKING

from hrchat_service.core.settings import (
    AppSettings,
    AuthSettings,
    LoggingSettings,
    PubSubSettings,
    get_app_settings,
    get_auth_settings,
    get_logging_settings,
    get_pubsub_settings,
)
from hrchat_service.infra.auth.tokens import build_token_validator
from hrchat_service.infra.logging.config import setup_logging
from hrchat_service.infra.metrics.prometheus import application_info
from hrchat_service.infra.realtime.dispatcher import json_serializer
from hrchat_service.infra.realtime.manager import SessionManager
from hrchat_service.infra.realtime.publisher import InstrumentedPublisher, Publisher
from hrchat_service.infra.realtime.registry import ChannelRegistry

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)

# Seconds to wait for in-flight writes when shutting down
SHUTDOWN_GRACE_PERIOD = 5.0


# =============================================================================
# Startup functions - organized by service
# =============================================================================


def _startup_core(app_settings: AppSettings, log_settings: LoggingSettings) -> None:
    """Initialize core services: logging and the application info metric."""
    setup_logging(log_settings=log_settings)
    logger.info(
        "Application starting",
        extra={
            "service": app_settings.service_name,
            "environment": app_settings.environment,
            "version": app_settings.version,
        },
    )

    application_info.info(
        {
            "version": app_settings.version,
            "service": app_settings.service_name,
            "environment": app_settings.environment,
        },
    )


def init_realtime(
    app: FastAPI,
    pubsub_settings: PubSubSettings | None = None,
    auth_settings: AuthSettings | None = None,
) -> SessionManager:
    """Build the fan-out core and attach it to ``app.state``.

    Sets ``registry``, ``session_manager`` and ``publisher``.
    """
    pubsub = pubsub_settings or get_pubsub_settings()
    auth = auth_settings or get_auth_settings()

    registry = ChannelRegistry()

    manager = SessionManager(
        registry,
        build_token_validator(auth),
        queue_capacity=pubsub.queue_capacity,
        max_sessions_per_user=pubsub.max_sessions_per_user,
        serializer=partial(json_serializer, ensure_ascii=pubsub.ensure_ascii),
    )

    app.state.registry = registry
    app.state.session_manager = manager
    app.state.publisher = InstrumentedPublisher(
        Publisher(registry),
        log_publishes=pubsub.log_publishes,
    )

    logger.info(
        "Realtime core started",
        extra={
            "queue_capacity": pubsub.queue_capacity,
            "max_sessions_per_user": pubsub.max_sessions_per_user,
            "static_tokens": auth.has_static_tokens,
        },
    )
    return manager


async def shutdown_realtime(app: FastAPI, timeout: float = SHUTDOWN_GRACE_PERIOD) -> None:
    """Close every live session and detach the fan-out core from ``app.state``."""
    manager: SessionManager | None = getattr(app.state, "session_manager", None)
    if manager is None:
        return

    await manager.shutdown(timeout=timeout)
    app.state.registry.clear()
    app.state.session_manager = None
    app.state.publisher = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start services on startup and stop them, in reverse order, on shutdown."""
    state = app.state
    app_settings: AppSettings = getattr(state, "app_settings", None) or get_app_settings()
    log_settings: LoggingSettings = getattr(state, "log_settings", None) or get_logging_settings()

    _startup_core(app_settings, log_settings)
    init_realtime(
        app,
        getattr(state, "pubsub_settings", None),
        getattr(state, "auth_settings", None),
    )

    try:
        yield
    finally:
        await shutdown_realtime(app)
        logger.info("Application stopped", extra={"service": app_settings.service_name})


__all__ = ["init_realtime", "lifespan", "shutdown_realtime"]
