"""CLI utilities for formatting output."""

from hrchat_service.cli.utils.formatters import error, info, key_value, section, success, warning

__all__ = ["error", "info", "key_value", "section", "success", "warning"]
