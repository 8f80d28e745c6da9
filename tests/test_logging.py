from __future__ import annotations

import json
import logging

from clientdesk.core.logging import (
    CORRELATION_ID_CTX,
    SESSION_EMAIL_CTX,
    JsonLogFormatter,
    set_correlation_id,
    set_session_email,
    setup_logging,
)


def test_json_formatter_includes_correlation_id_and_extra_fields() -> None:
    token = CORRELATION_ID_CTX.set("")
    try:
        set_correlation_id("req-42")
        record = logging.LogRecord(
            name="clientdesk.assignments.store",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Deleted client assignment",
            args=(),
            exc_info=None,
        )
        record.client_id = "a1"
        record.collection = ""

        payload = json.loads(JsonLogFormatter().format(record))
    finally:
        CORRELATION_ID_CTX.reset(token)

    assert payload["correlation_id"] == "req-42"
    assert payload["client_id"] == "a1"
    assert payload["level"] == "INFO"
    assert payload["service"] == "clientdesk"
    assert "collection" not in payload
    assert "user" not in payload


def test_json_formatter_tags_lines_with_session_email() -> None:
    token = SESSION_EMAIL_CTX.set("")
    try:
        set_session_email("ken@example.com")
        record = logging.LogRecord(
            name="clientdesk.assignments.editing",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg="Inline edit failed: %s",
            args=("boom",),
            exc_info=None,
        )
        record.field = "work"

        payload = json.loads(JsonLogFormatter().format(record))
    finally:
        SESSION_EMAIL_CTX.reset(token)

    assert payload["user"] == "ken@example.com"
    assert payload["field"] == "work"
    assert payload["message"] == "Inline edit failed: boom"


def test_setup_logging_quiets_driver_loggers() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    pymongo_logger = logging.getLogger("pymongo")
    saved_pymongo_level = pymongo_logger.level
    try:
        setup_logging("debug")

        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JsonLogFormatter)
        assert pymongo_logger.level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        pymongo_logger.setLevel(saved_pymongo_level)
