import json
import logging

from solo_subtitles.logging_setup import REQUEST_ID, JSONFormatter, RequestIdFilter, _build_handlers
from solo_subtitles.settings import Settings


def _record(msg="hello"):
    return logging.LogRecord("solo_subtitles.test", logging.INFO, __file__, 1, msg, None, None)


def test_json_formatter_includes_request_id():
    token = REQUEST_ID.set("rid-1")
    try:
        payload = json.loads(JSONFormatter().format(_record()))
    finally:
        REQUEST_ID.reset(token)
    assert payload["msg"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["rid"] == "rid-1"


def test_json_formatter_without_request_id():
    payload = json.loads(JSONFormatter().format(_record()))
    assert "rid" not in payload


def test_request_id_filter_prefixes_once():
    record = _record()
    token = REQUEST_ID.set("rid-2")
    try:
        RequestIdFilter().filter(record)
        RequestIdFilter().filter(record)
    finally:
        REQUEST_ID.reset(token)
    assert record.msg == "[rid=rid-2] hello"


def test_build_handlers_adds_rotating_file(tmp_path):
    handlers = _build_handlers(Settings(log_file=str(tmp_path / "app.log"), json_logs=True))
    try:
        assert len(handlers) == 2
        assert all(isinstance(h.formatter, JSONFormatter) for h in handlers)
    finally:
        for handler in handlers:
            handler.close()
