"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hrchat_service.app.exception_handlers import configure_exception_handlers
from hrchat_service.app.lifespan import lifespan
from hrchat_service.app.router import setup_routers
from hrchat_service.core.settings import (
    AppSettings,
    AuthSettings,
    GraphQLSettings,
    LoggingSettings,
    PubSubSettings,
    get_app_settings,
    get_graphql_settings,
)


def create_app(
    *,
    app_settings: AppSettings | None = None,
    graphql_settings: GraphQLSettings | None = None,
    pubsub_settings: PubSubSettings | None = None,
    auth_settings: AuthSettings | None = None,
    log_settings: LoggingSettings | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Settings default to the cached ``get_*_settings()`` loaders; explicit
    arguments override them for this application only.

    Returns:
        Configured FastAPI application instance.
    """
    app_settings = app_settings or get_app_settings()
    graphql_settings = graphql_settings or get_graphql_settings()

    app = FastAPI(
        title=app_settings.title,
        version=app_settings.version,
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    # Read by the lifespan when the realtime core starts
    app.state.app_settings = app_settings
    app.state.pubsub_settings = pubsub_settings
    app.state.auth_settings = auth_settings
    app.state.log_settings = log_settings

    configure_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_routers(app, app_settings, graphql_settings)
    return app


__all__ = ["create_app"]
