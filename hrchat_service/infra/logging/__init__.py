"""Logging infrastructure.

Structured logging with:
- JSONL format for log aggregation
- Automatic context injection (session_id, subject_id, topic)
- QueueHandler + QueueListener for non-blocking I/O

Basic usage:
    from hrchat_service.infra.logging import set_log_context
    import logging

    logger = logging.getLogger(__name__)

    set_log_context(session_id="abc-123", subject_id="42")
    logger.info("Delivering event")  # Includes session_id and subject_id
"""

from hrchat_service.infra.logging.config import configure_logging, setup_logging, shutdown
from hrchat_service.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    log_context,
    set_log_context,
)
from hrchat_service.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
