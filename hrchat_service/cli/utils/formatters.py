"""Styled terminal output for CLI commands.

Status lines go to stderr so command results on stdout (tokens, JSON
config) stay pipeable.
"""

from typing import Any

import click

RULE_WIDTH = 48


def _emit(marker: str, message: str, color: str) -> None:
    click.secho(f"{marker} {message}", fg=color, err=True)


def success(message: str) -> None:
    _emit("✓", message, "green")


def error(message: str) -> None:
    _emit("✗", message, "red")


def warning(message: str) -> None:
    _emit("!", message, "yellow")


def info(message: str) -> None:
    _emit("-", message, "cyan")


def section(title: str) -> None:
    """Print ``title`` underlined, preceded by a blank line."""
    click.echo()
    click.secho(title, bold=True)
    click.secho("-" * min(RULE_WIDTH, max(len(title), 8)), dim=True)


def key_value(key: str, value: Any, width: int = 24) -> None:
    """Print one aligned ``key value`` row."""
    click.echo(f"  {click.style(key.ljust(width), fg='cyan')} {value}")
