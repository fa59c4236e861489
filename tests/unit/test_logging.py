"""
Tests for structured logging formatters and the log context.
"""

import json
import logging

import pytest

from relay.logging import (
    HumanReadableFormatter,
    StructuredJSONFormatter,
    clear_log_context,
    get_log_context,
    set_log_context,
)


def make_record(msg: str = "hello", level: int = logging.INFO, **extra):
    record = logging.LogRecord(
        name="relay",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def reset_context():
    clear_log_context()
    yield
    clear_log_context()


class TestLogContext:
    def test_set_merges_fields(self):
        set_log_context(connection_id="abc")
        set_log_context(room="ops")

        assert get_log_context() == {"connection_id": "abc", "room": "ops"}

    def test_clear(self):
        set_log_context(connection_id="abc")
        clear_log_context()

        assert get_log_context() == {}


class TestStructuredJSONFormatter:
    def test_standard_fields(self):
        output = json.loads(StructuredJSONFormatter().format(make_record()))

        assert output["message"] == "hello"
        assert output["level"] == "INFO"
        assert output["logger"] == "relay"
        assert "timestamp" in output
        assert "environment" in output

    def test_includes_context_and_extra_fields(self):
        set_log_context(connection_id="abc")

        output = json.loads(
            StructuredJSONFormatter().format(make_record(reason="queue_full"))
        )

        assert output["connection_id"] == "abc"
        assert output["reason"] == "queue_full"


class TestHumanReadableFormatter:
    def test_uses_placeholder_without_correlation_id(self):
        output = HumanReadableFormatter().format(make_record("hi there"))

        assert "[-] INFO: hi there" in output

    def test_error_format_includes_location(self):
        output = HumanReadableFormatter().format(
            make_record("boom", level=logging.ERROR)
        )

        assert "ERROR:" in output
        assert ":10 - boom" in output
