"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging

import pytest

from hrchat_service.infra.logging import (
    ContextInjectingFilter,
    JSONFormatter,
    clear_log_context,
    configure_logging,
    get_log_context,
    log_context,
    set_log_context,
    shutdown,
)


def make_record(msg: str = "Subscription opened", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="hrchat_service.infra.realtime.manager",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _clean_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.mark.unit
class TestLogContext:
    """Tests for contextvar-based log context."""

    def test_set_merges(self):
        set_log_context(session_id="abc")
        set_log_context(topic="message_received_42")

        assert get_log_context() == {"session_id": "abc", "topic": "message_received_42"}

    def test_log_context_restores_on_exit(self):
        set_log_context(transport="graphql")

        with log_context(subject_id="42", transport="websocket"):
            assert get_log_context() == {"subject_id": "42", "transport": "websocket"}

        assert get_log_context() == {"transport": "graphql"}

    def test_get_returns_copy(self):
        set_log_context(session_id="abc")
        get_log_context()["session_id"] = "changed"
        assert get_log_context()["session_id"] == "abc"

    def test_filter_injects_context_without_overwriting(self):
        set_log_context(subject_id="42", topic="ctx-topic")
        record = make_record(topic="record-topic")

        assert ContextInjectingFilter().filter(record) is True
        assert record.subject_id == "42"
        assert record.topic == "record-topic"


@pytest.mark.unit
class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_formats_single_json_line(self):
        formatter = JSONFormatter(static={"service": "hrchat-service"})
        output = formatter.format(make_record(topic="message_received_42", subscribers=2))

        assert "\n" not in output
        data = json.loads(output)
        assert data["level"] == "INFO"
        assert data["logger"] == "hrchat_service.infra.realtime.manager"
        assert data["message"] == "Subscription opened"
        assert data["service"] == "hrchat-service"
        assert data["topic"] == "message_received_42"
        assert data["subscribers"] == 2
        assert data["timestamp"].endswith("Z")

    def test_no_trace_ids_without_active_span(self):
        data = json.loads(JSONFormatter().format(make_record()))
        assert "trace_id" not in data

    def test_exception_is_kept_on_one_line(self):
        try:
            raise ValueError("bad payload")
        except ValueError:
            import sys

            record = make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad payload" in data["exception"]
        assert "\n" not in data["exception"]

    def test_unserializable_extra_is_stringified(self):
        data = json.loads(JSONFormatter().format(make_record(session=object())))
        assert data["session"].startswith("<object object")


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_file_handler_writes_json_lines(self, tmp_path):
        log_file = tmp_path / "logs" / "hrchat.log"

        configure_logging(log_level="INFO", file_path=log_file, console_enabled=False)
        try:
            with log_context(subject_id="42"):
                logging.getLogger("hrchat_service.tests").info(
                    "Subscription opened", extra={"topic": "message_received_42"},
                )
        finally:
            # Stopping the listener flushes the queue
            shutdown()

        data = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert data["message"] == "Subscription opened"
        assert data["topic"] == "message_received_42"
        assert data["subject_id"] == "42"
        assert data["service"] == "hrchat-service"

    def test_traceback_survives_the_queue(self, tmp_path):
        log_file = tmp_path / "hrchat.log"

        configure_logging(log_level="INFO", file_path=log_file, console_enabled=False)
        try:
            try:
                raise ConnectionResetError("peer gone")
            except ConnectionResetError:
                logging.getLogger("hrchat_service.tests").exception("Delivery failed")
        finally:
            shutdown()

        data = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert data["message"] == "Delivery failed"
        assert "ConnectionResetError: peer gone" in data["exception"]
