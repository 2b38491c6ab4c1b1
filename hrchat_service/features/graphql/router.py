"""GraphQL router for FastAPI integration.

Provides:
- GraphQL endpoint at GRAPHQL_PATH (default /gql-point) for queries
- WebSocket subscriptions on the same path (graphql-transport-ws and graphql-ws)
- Optional in-browser IDE
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from starlette.requests import HTTPConnection
from strawberry.fastapi import GraphQLRouter

from hrchat_service.core.settings import get_graphql_settings
from hrchat_service.features.graphql.context import GraphQLContext
from hrchat_service.features.graphql.schema import schema

if TYPE_CHECKING:
    from hrchat_service.core.settings import GraphQLSettings

logger = logging.getLogger(__name__)


async def get_graphql_context(connection: HTTPConnection) -> GraphQLContext:
    """Create GraphQL context from application state.

    Strawberry fills in request, response, background tasks and, for
    WebSocket subscriptions, the connection params.

    Args:
        connection: The HTTP request or WebSocket being served

    Returns:
        GraphQLContext for use in resolvers
    """
    state = connection.app.state
    return GraphQLContext(
        session_manager=state.session_manager,
        publisher=state.publisher,
    )


def create_graphql_router(settings: GraphQLSettings | None = None) -> GraphQLRouter:
    """Create GraphQL router with settings-based configuration."""
    settings = settings or get_graphql_settings()

    subscription_protocols: tuple[str, ...] = ()
    if settings.subscriptions_enabled:
        subscription_protocols = (
            "graphql-transport-ws",
            "graphql-ws",
        )

    graphql_app: GraphQLRouter = GraphQLRouter(
        schema,
        path=settings.path,
        context_getter=cast("Any", get_graphql_context),
        subscription_protocols=subscription_protocols,
        graphql_ide=settings.graphql_ide or None,
    )
    logger.info(
        "GraphQL router configured",
        extra={"path": settings.path, "subscriptions": settings.subscriptions_enabled},
    )
    return graphql_app


__all__ = ["create_graphql_router", "get_graphql_context"]
