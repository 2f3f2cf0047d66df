"""
Logging setup: text and JSON line formats.
"""
import json
import logging

from pc_app.core.logging import JsonFormatter, configure_logging, get_logger


def test_json_formatter_escapes_message():
    record = logging.LogRecord("pc_app.test", logging.WARNING, __file__, 12, 'bad "name" %s', ("x",), None)
    line = JsonFormatter().format(record)
    payload = json.loads(line)
    assert payload["message"] == 'bad "name" x'
    assert payload["level"] == "WARNING"
    assert payload["line"] == 12


def test_configure_replaces_handlers():
    configure_logging("DEBUG")
    configure_logging("INFO", json=True)
    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert root.level == logging.INFO
    assert logging.getLogger("PIL").level == logging.INFO
    configure_logging("INFO")


def test_default_logger_name():
    assert get_logger().name == "pc_app"
