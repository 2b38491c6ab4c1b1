"""Main CLI entry point for hrchat-service management commands."""

import click

from hrchat_service import __version__
from hrchat_service.cli.commands import config, server, token
from hrchat_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="hrchat-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """HR Chat Service CLI - real-time chat event server.

    \b
    Commands:
      serve      Run the server (REST, GraphQL, WebSocket)
      token      Mint and inspect user tokens
      config     Show effective configuration

    \b
    Quick Start:
      hrchat-service config show
      hrchat-service token mint 42
      hrchat-service serve --port 3013
    """
    ctx.ensure_object(dict)


cli.add_command(server.serve)
cli.add_command(token.token)
cli.add_command(config.config)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
