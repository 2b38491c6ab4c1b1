"""Configuration management commands."""

import json

import click

from hrchat_service.cli.utils import key_value, section, warning
from hrchat_service.core.settings import (
    get_app_settings,
    get_auth_settings,
    get_graphql_settings,
    get_logging_settings,
    get_pubsub_settings,
)


@click.group(name="config")
def config() -> None:
    """Configuration management commands."""


@config.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "table"]),
    default="table",
    help="Output format",
)
@click.option(
    "--show-secrets/--hide-secrets",
    default=False,
    help="Show static user tokens",
)
def show(output_format: str, show_secrets: bool) -> None:
    """Display current configuration settings."""
    auth = get_auth_settings()
    config_dict: dict[str, dict[str, object]] = {
        "app": get_app_settings().model_dump(mode="json"),
        "logging": get_logging_settings().model_dump(mode="json"),
        "pubsub": get_pubsub_settings().model_dump(mode="json"),
        "auth": {
            "accept_bearer_prefix": auth.accept_bearer_prefix,
            "static_tokens": (
                dict(auth.static_tokens)
                if show_secrets
                else {"***": f"{len(auth.static_tokens)} token(s)"}
            ),
        },
        "graphql": get_graphql_settings().model_dump(mode="json"),
    }

    if not show_secrets and auth.has_static_tokens:
        warning("Static tokens are hidden. Use --show-secrets to display them.")

    if output_format == "json":
        click.echo(json.dumps(config_dict, indent=2))
        return

    for name, values in config_dict.items():
        section(name.upper())
        for key, value in values.items():
            key_value(key, value)
