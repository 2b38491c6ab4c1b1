"""Server commands."""

import click

from hrchat_service.cli.utils import info, success
from hrchat_service.core.settings import get_app_settings, get_graphql_settings


@click.command(name="serve")
@click.option("--host", default=None, help="Host to bind (default: APP_HOST)")
@click.option("--port", default=None, type=int, help="Port to bind (default: APP_PORT)")
@click.option("--reload/--no-reload", default=False, help="Enable auto-reload on code changes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["critical", "error", "warning", "info", "debug", "trace"]),
    help="Uvicorn log level",
)
def serve(host: str | None, port: int | None, reload: bool, log_level: str) -> None:
    """Run the HTTP, GraphQL and WebSocket server with uvicorn."""
    import uvicorn

    settings = get_app_settings()
    graphql = get_graphql_settings()
    host = host or settings.host
    port = port or settings.port

    info(f"Environment: {settings.environment}")
    info(f"REST API: http://{host}:{port}{settings.api_prefix}")
    if graphql.enabled:
        info(f"GraphQL: http://{host}:{port}{graphql.path}")
    success("Starting uvicorn...")

    uvicorn.run(
        "hrchat_service.app.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
        access_log=settings.debug,
    )
