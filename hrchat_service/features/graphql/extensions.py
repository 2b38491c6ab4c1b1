"""Strawberry extensions for the GraphQL schema.

Provides:
- Query depth limiting (max depth=10)
- Introspection switch (GRAPHQL_INTROSPECTION_ENABLED)
"""

from __future__ import annotations

import logging

from graphql.validation import NoSchemaIntrospectionCustomRule
from strawberry.extensions import AddValidationRules, QueryDepthLimiter

logger = logging.getLogger(__name__)

# Maximum query depth to prevent deeply nested queries
MAX_QUERY_DEPTH = 10


def get_extensions(*, introspection_enabled: bool = True) -> list:
    """Get list of Strawberry extensions for the schema.

    Args:
        introspection_enabled: Whether clients may run introspection queries.

    Returns:
        List of extension instances
    """
    extensions: list = [
        QueryDepthLimiter(max_depth=MAX_QUERY_DEPTH),
    ]
    if not introspection_enabled:
        extensions.append(AddValidationRules([NoSchemaIntrospectionCustomRule]))

    logger.debug(
        "GraphQL extensions configured",
        extra={"max_depth": MAX_QUERY_DEPTH, "introspection": introspection_enabled},
    )
    return extensions


__all__ = ["MAX_QUERY_DEPTH", "get_extensions"]
