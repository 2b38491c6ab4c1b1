"""GraphQL schema assembly.

Combines the Query and Subscription root types into a single schema.
Field names are not camel-cased: chat types keep the database column names
clients already select, and root fields carry explicit GraphQL names.
"""

from __future__ import annotations

import logging

from strawberry.schema.config import StrawberryConfig

from hrchat_service.core.settings import get_graphql_settings
from hrchat_service.features.graphql.errors import ChatSchema
from hrchat_service.features.graphql.extensions import get_extensions
from hrchat_service.features.graphql.resolvers import Query, Subscription

logger = logging.getLogger(__name__)


def create_schema(*, introspection_enabled: bool | None = None) -> ChatSchema:
    """Build the schema; introspection defaults to GRAPHQL_INTROSPECTION_ENABLED."""
    if introspection_enabled is None:
        introspection_enabled = get_graphql_settings().introspection_enabled

    return ChatSchema(
        query=Query,
        subscription=Subscription,
        config=StrawberryConfig(auto_camel_case=False),
        extensions=get_extensions(introspection_enabled=introspection_enabled),
    )


schema = create_schema()

logger.debug("GraphQL schema created")

__all__ = ["create_schema", "schema"]
