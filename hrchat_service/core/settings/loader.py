"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Usage:
    from hrchat_service.core.settings.loader import get_pubsub_settings

    settings = get_pubsub_settings()  # First call: loads and validates
    settings = get_pubsub_settings()  # Subsequent calls: returns cached instance

Testing:
    In tests, clear the cache to force reload:
    get_pubsub_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .auth import AuthSettings
from .graphql import GraphQLSettings
from .logs import LoggingSettings
from .pubsub import PubSubSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_pubsub_settings() -> PubSubSettings:
    """Get cached publish/subscribe settings."""
    return PubSubSettings()


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    """Get cached authentication settings."""
    return AuthSettings()


@lru_cache(maxsize=1)
def get_graphql_settings() -> GraphQLSettings:
    """Get cached GraphQL settings."""
    return GraphQLSettings()


def clear_all_caches() -> None:
    """Clear every cached settings instance (tests and CLI reloads)."""
    get_app_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_pubsub_settings.cache_clear()
    get_auth_settings.cache_clear()
    get_graphql_settings.cache_clear()
