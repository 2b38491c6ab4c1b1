"""Contextvar log context for subscriptions.

Fields bound here (``subject_id``, ``topic``, ``transport``...) are copied
onto every record logged by the same task, so session logs can be correlated
without threading ids through every call.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
import logging
from typing import Any

from hrchat_service.infra.logging.formatters import trace_fields

# Each asyncio task runs with its own copy of the context
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Merge ``kwargs`` into the current task's log context.

    Example:
        set_log_context(subject_id="42", transport="websocket")
        logger.info("Subscription opened")  # carries subject_id and transport
    """
    _log_context.set({**_log_context.get(), **kwargs})


def get_log_context() -> dict[str, Any]:
    """Copy of the current log context."""
    return dict(_log_context.get())


def clear_log_context() -> None:
    _log_context.set({})


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind ``kwargs`` for the duration of a ``with`` block, then restore.

    Example:
        with log_context(subject_id=session.subject_id, topic=session.topic):
            await dispatcher.run(sink)
    """
    token = _log_context.set({**_log_context.get(), **kwargs})
    try:
        yield
    finally:
        _log_context.reset(token)


class ContextInjectingFilter(logging.Filter):
    """Copy the log context and active trace ids onto each record.

    Fields passed through ``extra`` are never overridden.

    Attached to the root queue handler by :func:`configure_logging`.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in {**trace_fields(), **_log_context.get()}.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


__all__ = [
    "ContextInjectingFilter",
    "clear_log_context",
    "get_log_context",
    "log_context",
    "set_log_context",
]
