"""Unit tests for log record context and JSON formatting."""

import json
import logging

from featherlearn.logging_config import (
    ContextFilter,
    JsonFormatter,
    bind_user_id,
    request_id_var,
    user_id_var,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("featherlearn.test", logging.INFO, __file__, 1, "Lesson %s", ("done",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_filter_copies_context_onto_record():
    rid_token = request_id_var.set("req-123")
    uid_token = user_id_var.set(None)
    try:
        bind_user_id("user-9")
        record = _record()
        assert ContextFilter().filter(record) is True
        assert record.request_id == "req-123"
        assert record.user_id == "user-9"
    finally:
        user_id_var.reset(uid_token)
        request_id_var.reset(rid_token)


def test_filter_uses_placeholder_without_context():
    record = _record()
    ContextFilter().filter(record)
    assert record.request_id == "-"
    assert record.user_id == "-"


def test_json_formatter_includes_extra_fields():
    record = _record(request_id="req-1", user_id="-", score=90, lesson_id="abc")
    data = json.loads(JsonFormatter().format(record))

    assert data["message"] == "Lesson done"
    assert data["level"] == "INFO"
    assert data["request_id"] == "req-1"
    assert "user_id" not in data
    assert data["score"] == 90
    assert data["lesson_id"] == "abc"


def test_json_formatter_stringifies_unserializable_values():
    record = _record(request_id="-", user_id="-", payload=object())
    data = json.loads(JsonFormatter().format(record))
    assert data["payload"].startswith("<object object")
