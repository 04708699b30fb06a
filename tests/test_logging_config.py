import json
import logging
import sys

from app.logging_config import JSONFormatter, bind_logger, get_logger, setup_logging


def _record(message, **extra):
    record = logging.LogRecord("chatbot.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record("Webhook sent")))

        assert data["level"] == "INFO"
        assert data["logger"] == "chatbot.test"
        assert data["message"] == "Webhook sent"
        assert "timestamp" in data
        assert "context" not in data

    def test_context_is_included(self):
        data = json.loads(JSONFormatter().format(_record("x", context={"instance": "loja-1", "status": "sent"})))
        assert data["context"] == {"instance": "loja-1", "status": "sent"}

    def test_non_serializable_context(self):
        data = json.loads(JSONFormatter().format(_record("x", context={"value": object})))
        assert "object" in data["context"]["value"]

    def test_exception_is_formatted(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("chatbot.test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: boom" in data["exception"]


def test_get_logger_namespace():
    assert get_logger("dispatch_service").name == "chatbot.dispatch_service"


def test_bound_context_is_merged(caplog):
    log = bind_logger("test_bind", instance="loja-1")

    with caplog.at_level(logging.INFO, logger="chatbot.test_bind"):
        log.info("hello", extra={"context": {"status": "sent"}})

    assert caplog.records[0].context == {"instance": "loja-1", "status": "sent"}


def test_setup_logging_installs_json_handler():
    setup_logging("WARNING")
    root = logging.getLogger()

    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JSONFormatter)
    setup_logging("INFO")
