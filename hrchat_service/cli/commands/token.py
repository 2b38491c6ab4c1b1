"""User token commands for local testing of subscriptions."""

import sys

import click

from hrchat_service.cli.utils import error, success
from hrchat_service.core.settings import get_auth_settings
from hrchat_service.infra.auth.tokens import build_token_validator, encode_user_token


@click.group(name="token")
def token() -> None:
    """User token helpers."""


@token.command()
@click.argument("user_id", type=click.IntRange(min=0))
@click.option("--issued", default="", help="Opaque data appended after the user id")
def mint(user_id: int, issued: str) -> None:
    """Print a user token for USER_ID."""
    click.echo(encode_user_token(user_id, issued))


@token.command()
@click.argument("credential")
def inspect(credential: str) -> None:
    """Validate CREDENTIAL and print the user id it resolves to."""
    identity = build_token_validator(get_auth_settings()).validate(credential)
    if identity is None:
        error("Invalid user token")
        sys.exit(1)
    success(f"Valid token for user {identity.subject_id}")
