import json
import logging
import sys

from ine_mcp.config import default_config
from ine_mcp.logging_config import JsonFormatter, build_handler, resolve_level


def test_logging_level_config():
    level = resolve_level(default_config.log_level)
    assert level in (
        logging.DEBUG,
        logging.INFO,
        logging.WARNING,
        logging.ERROR,
        logging.CRITICAL,
    )


def test_resolve_level_falls_back_to_info():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("chatty") == logging.INFO


def test_json_formatter_includes_extras():
    record = logging.LogRecord("ine_mcp.mcp", logging.WARNING, __file__, 1, "tool=%s failed", ("x",), None)
    record.tool = "ine_operacion"
    record.request_id = "abc"
    record.error = "HTTP 404"
    payload = json.loads(JsonFormatter().format(record))
    assert payload == {
        "level": "WARNING",
        "message": "tool=x failed",
        "name": "ine_mcp.mcp",
        "tool": "ine_operacion",
        "request_id": "abc",
        "error": "HTTP 404",
    }


def test_handlers_write_to_stderr():
    json_handler = build_handler("json")
    plain_handler = build_handler("plain")
    assert json_handler.stream is sys.stderr
    assert isinstance(json_handler.formatter, JsonFormatter)
    assert not isinstance(plain_handler.formatter, JsonFormatter)
