"""JSON Lines formatter with OpenTelemetry trace correlation."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from typing import Any

from opentelemetry import trace

# Attributes every LogRecord carries; anything else came from ``extra`` or the
# log context and is emitted as a top-level field.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "taskName"}

_BASE_FIELDS = {"level": "levelname", "logger": "name", "message": "message"}


def _utc_timestamp(created: float) -> str:
    stamp = datetime.fromtimestamp(created, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _one_line(text: str) -> str:
    return text.replace("\n", "\\n")


def trace_fields() -> dict[str, str]:
    """``trace_id``/``span_id`` of the active span, or nothing outside a span."""
    ctx = trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return {}
    return {"trace_id": format(ctx.trace_id, "032x"), "span_id": format(ctx.span_id, "016x")}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, UTC millisecond timestamps.

    Tracebacks are flattened onto the record's single line. Trace ids already
    stamped on the record (by the context filter, in the logging thread) win
    over a lookup here, since this may run on the queue listener thread.

    Example output:
        {"level": "INFO", "logger": "hrchat_service.infra.realtime.manager", "message": "Subscription opened", "timestamp": "2025-01-01T00:00:00.123Z", "topic": "message_received_42"}
    """

    def __init__(self, static: dict[str, Any] | None = None) -> None:
        super().__init__()
        self.static = dict(static or {})

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        data: dict[str, Any] = {key: getattr(record, attr) for key, attr in _BASE_FIELDS.items()}
        data["timestamp"] = _utc_timestamp(record.created)

        if not hasattr(record, "trace_id"):
            data.update(trace_fields())

        exc_text = self.formatException(record.exc_info) if record.exc_info else record.exc_text
        if exc_text:
            data["exception"] = _one_line(exc_text)
        if record.stack_info:
            data["stack_trace"] = _one_line(record.stack_info)

        data.update(self.static)
        data.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in data
        )
        return json.dumps(data, ensure_ascii=False, default=str)


__all__ = ["JSONFormatter", "trace_fields"]
