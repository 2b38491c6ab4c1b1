"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from hrchat_service.core.settings import get_app_settings, get_graphql_settings
from hrchat_service.features.health.router import router as health_router
from hrchat_service.features.metrics.router import router as metrics_router
from hrchat_service.features.realtime.router import router as realtime_router
from hrchat_service.features.realtime.router import ws_router as realtime_ws_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from hrchat_service.core.settings import AppSettings, GraphQLSettings

logger = logging.getLogger(__name__)


def setup_routers(
    app: FastAPI,
    app_settings: AppSettings | None = None,
    graphql_settings: GraphQLSettings | None = None,
) -> None:
    """Register all feature routers with the application.

    Args:
        app: FastAPI application instance.
        app_settings: Optional application settings override for the API prefix.
        graphql_settings: Optional override controlling GraphQL availability.
    """
    app_settings = app_settings or get_app_settings()
    graphql_settings = graphql_settings or get_graphql_settings()

    api_prefix = app_settings.api_prefix

    # Include metrics endpoint (no prefix - accessible at /metrics)
    app.include_router(metrics_router, tags=["observability"])

    app.include_router(health_router, prefix=api_prefix, tags=["health"])
    app.include_router(realtime_router, prefix=api_prefix, tags=["realtime"])

    # Plain WebSocket stream (no API prefix - accessible at /ws/events)
    app.include_router(realtime_ws_router)

    if graphql_settings.enabled:
        from hrchat_service.features.graphql.router import create_graphql_router

        app.include_router(create_graphql_router(graphql_settings), tags=["graphql"])
        logger.info(
            "GraphQL endpoint registered at %s (subscriptions: %s)",
            graphql_settings.path,
            "enabled" if graphql_settings.subscriptions_enabled else "disabled",
        )
    else:
        logger.info("GraphQL endpoint disabled")


__all__ = ["setup_routers"]
