"""GraphQL server configuration settings.

Controls the GraphQL endpoint, IDE and subscriptions.
Environment variables use GRAPHQL_ prefix.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

GraphQLIDE = Literal["graphiql", "apollo-sandbox", "pathfinder", False]


class GraphQLSettings(BaseSettings):
    """GraphQL server configuration.

    Environment variables use GRAPHQL_ prefix.
    Example: GRAPHQL_ENABLED=true, GRAPHQL_PATH=/gql-point
    """

    enabled: bool = Field(
        default=True,
        description="Enable GraphQL endpoint",
    )

    path: str = Field(
        default="/gql-point",
        min_length=1,
        max_length=255,
        pattern=r"^/.*$",
        description="GraphQL endpoint path (HTTP queries and WebSocket subscriptions)",
    )

    graphql_ide: GraphQLIDE = Field(
        default="graphiql",
        description="GraphQL IDE to use: graphiql, apollo-sandbox, pathfinder, or false to disable",
    )

    subscriptions_enabled: bool = Field(
        default=True,
        description="Enable GraphQL subscriptions (WebSocket)",
    )

    introspection_enabled: bool = Field(
        default=True,
        description="Enable GraphQL schema introspection",
    )

    model_config = SettingsConfigDict(
        env_prefix="GRAPHQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
