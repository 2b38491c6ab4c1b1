"""Logging setup shared by the server and the CLI.

The root logger gets a single ``QueueHandler``; a ``QueueListener`` thread
owns the real handlers (console and optional rotating file). Publish and
delivery paths therefore never block on log I/O. The context filter sits on
the queue handler so it runs in the logging task, where the contextvars live.
"""

from __future__ import annotations

import atexit
import copy
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import SimpleQueue
from typing import TYPE_CHECKING, Any

from hrchat_service.infra.logging.context import ContextInjectingFilter
from hrchat_service.infra.logging.formatters import JSONFormatter

if TYPE_CHECKING:
    from hrchat_service.core.settings.logs import LoggingSettings

SERVICE_NAME = "hrchat-service"
TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Loggers too chatty at DEBUG/INFO for a long-lived socket server
NOISY_LOGGERS = ("uvicorn.access", "httpx", "websockets", "graphql")

_listener: QueueListener | None = None
_queue_handler: _RecordQueueHandler | None = None
_configured = False


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **overrides: Any,
) -> None:
    """Configure logging once per process.

    Later calls are ignored unless ``force`` is set, so whichever entrypoint
    runs first (CLI or application lifespan) decides the configuration.

    Args:
        log_settings: Settings to apply; defaults to ``get_logging_settings()``.
        force: Reconfigure even if logging was already set up.
        **overrides: Keyword overrides for :func:`configure_logging`.
    """
    global _configured

    if _configured and not force:
        return

    if log_settings is None:
        from hrchat_service.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    configure_logging(**{**log_settings.to_logging_kwargs(), **overrides})
    _configured = True


def configure_logging(
    log_level: str = "INFO",
    file_path: str | Path | None = None,
    json_logs: bool = True,
    console_enabled: bool = True,
    include_context: bool = True,
    capture_warnings: bool = True,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
) -> None:
    """Apply a logging configuration, replacing any previous one from here."""
    shutdown()
    logging.captureWarnings(capture_warnings)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "root": {"level": log_level.upper(), "handlers": []},
        },
    )

    handlers = _build_handlers(
        json_logs=json_logs,
        console_enabled=console_enabled,
        file_path=Path(file_path) if file_path else None,
        file_max_bytes=file_max_bytes,
        file_backup_count=file_backup_count,
    )
    _start_listener(handlers, include_context=include_context)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def shutdown() -> None:
    """Flush and stop the listener and detach the queue handler. Idempotent."""
    global _listener, _queue_handler

    if _listener is not None:
        _listener.stop()
        _listener = None

    if _queue_handler is not None:
        logging.getLogger().removeHandler(_queue_handler)
        _queue_handler = None


def _formatter(json_logs: bool) -> logging.Formatter:
    if json_logs:
        return JSONFormatter(static={"service": SERVICE_NAME})
    return logging.Formatter(TEXT_FORMAT)


def _build_handlers(
    *,
    json_logs: bool,
    console_enabled: bool,
    file_path: Path | None,
    file_max_bytes: int,
    file_backup_count: int,
) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []

    if console_enabled:
        handlers.append(logging.StreamHandler())

    if file_path is not None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                file_path,
                maxBytes=file_max_bytes,
                backupCount=file_backup_count,
                encoding="utf-8",
            ),
        )

    for handler in handlers:
        handler.setFormatter(_formatter(json_logs))
    return handlers


class _RecordQueueHandler(QueueHandler):
    """Queue a copy of the record with message and traceback rendered to text.

    Unlike the stock ``prepare`` this leaves ``msg`` unformatted by any
    formatter, so the listener-side formatter still sees ``exc_text``.
    """

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        record = copy.copy(record)
        record.msg = record.getMessage()
        record.args = None
        if record.exc_info:
            record.exc_text = _TRACEBACKS.formatException(record.exc_info)
            record.exc_info = None
        return record


_TRACEBACKS = logging.Formatter()


def _start_listener(handlers: list[logging.Handler], *, include_context: bool) -> None:
    global _listener, _queue_handler

    if not handlers:
        return

    queue: SimpleQueue[logging.LogRecord] = SimpleQueue()
    _listener = QueueListener(queue, *handlers, respect_handler_level=True)
    _listener.start()
    atexit.register(shutdown)

    _queue_handler = _RecordQueueHandler(queue)
    if include_context:
        # On the handler, not the root logger: logger filters skip propagated records
        _queue_handler.addFilter(ContextInjectingFilter())
    logging.getLogger().addHandler(_queue_handler)


__all__ = ["configure_logging", "setup_logging", "shutdown"]
