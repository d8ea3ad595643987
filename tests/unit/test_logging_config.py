"""Unit tests for logging configuration: session correlation and JSON output."""

import json
import logging

from smart_tutor.logging_config import (
    JsonFormatter,
    SessionIdFilter,
    bind_session_id,
    configure_logging,
    get_session_id,
)


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("smart_tutor.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_bind_session_id_is_scoped():
    assert get_session_id() is None
    with bind_session_id("abc123"):
        assert get_session_id() == "abc123"
    assert get_session_id() is None


def test_filter_adds_session_id():
    record = _record()
    with bind_session_id("abc123"):
        SessionIdFilter().filter(record)
    assert record.session_id == "abc123"

    record = _record()
    SessionIdFilter().filter(record)
    assert record.session_id == "-"


def test_json_formatter_includes_extra_fields():
    record = _record("Answer evaluated", session_id="s1", question_id="q9", earned_points=12)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "Answer evaluated"
    assert payload["session_id"] == "s1"
    assert payload["question_id"] == "q9"
    assert payload["earned_points"] == 12
    assert payload["level"] == "INFO"


def test_configure_logging_selects_formatter_by_environment():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(environment="production")
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

        configure_logging(environment="development", debug=True)
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.DEBUG
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
