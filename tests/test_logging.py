import json
import logging

from app.core.logging_config import JSONFormatter, TextFormatter, request_id_context


def _record(**extra):
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "stock %s", ("moved",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_request_id_and_extras():
    token = request_id_context.set("abc-123")
    try:
        line = JSONFormatter().format(_record(product_id=7))
    finally:
        request_id_context.reset(token)

    payload = json.loads(line)
    assert payload["message"] == "stock moved"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "app.test"
    assert payload["request_id"] == "abc-123"
    assert payload["product_id"] == 7


def test_explicit_request_id_wins():
    payload = json.loads(JSONFormatter().format(_record(request_id="given")))
    assert payload["request_id"] == "given"


def test_text_formatter_defaults_to_system():
    formatter = TextFormatter("[%(request_id)s] %(message)s")
    assert formatter.format(_record()) == "[system] stock moved"
