"""Modular Pydantic Settings v2 configuration.

Each domain owns one settings model with its own environment prefix:
    APP_      application identity and server binding
    LOG_      logging
    PUBSUB_   event fan-out and subscription sessions
    AUTH_     user token validation
    GRAPHQL_  GraphQL endpoint and subscriptions

Import settings via cached loaders:
    from hrchat_service.core.settings import get_pubsub_settings
"""

from __future__ import annotations

from .app import AppSettings
from .auth import AuthSettings
from .graphql import GraphQLSettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_auth_settings,
    get_graphql_settings,
    get_logging_settings,
    get_pubsub_settings,
)
from .logs import LoggingSettings
from .pubsub import PubSubSettings

__all__ = [
    "AppSettings",
    "AuthSettings",
    "GraphQLSettings",
    "LoggingSettings",
    "PubSubSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_auth_settings",
    "get_graphql_settings",
    "get_logging_settings",
    "get_pubsub_settings",
]
