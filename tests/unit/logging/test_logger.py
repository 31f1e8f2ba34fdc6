# tests/unit/logging/test_logger.py — v1
"""Tests for logging/logger.py — setup and formatters."""

from __future__ import annotations

import json
import logging

import pytest

from pdfetch.logging.context import clear_context, set_article_context, set_operation_context
from pdfetch.logging.logger import (
    ROOT_LOGGER,
    JsonFormatter,
    TextFormatter,
    get_logger,
    setup_logging,
)


def _record(msg: str = "Hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="pdfetch.test", level=logging.INFO, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )
    record.__dict__.update(extra)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger(ROOT_LOGGER)
    level, handlers = root.level, list(root.handlers)
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)
    for handler in handlers:
        root.addHandler(handler)


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert parsed["logger"] == "pdfetch.test"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_context(self):
        set_operation_context("acme", "list_changes_files")
        set_article_context("KB1")
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["context"] == {
            "instance": "acme", "operation": "list_changes_files", "article": "KB1",
        }

    def test_format_with_data(self):
        parsed = json.loads(JsonFormatter().format(_record(data={"count": 3})))
        assert parsed["data"] == {"count": 3}

    def test_format_exception(self):
        try:
            raise ValueError("bad")
        except ValueError:
            import sys

            record = _record()
            record.exc_info = sys.exc_info()
        parsed = json.loads(JsonFormatter().format(record))
        assert "ValueError: bad" in parsed["exception"]


class TestTextFormatter:
    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "Hello text" in output
        assert "[INFO    ]" in output

    def test_includes_article(self):
        set_article_context("KB0010279")
        assert "[KB0010279]" in TextFormatter().format(_record())


class TestGetLogger:
    def test_returns_child_logger(self):
        assert get_logger("sync").name == "pdfetch.sync"


class TestSetupLogging:
    def test_setup_json(self, restore_root_logger):
        setup_logging(level="DEBUG", log_format="json")
        assert restore_root_logger.level == logging.DEBUG
        assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)

    def test_setup_text(self, restore_root_logger):
        setup_logging(level="WARNING", log_format="text")
        assert restore_root_logger.level == logging.WARNING
        assert isinstance(restore_root_logger.handlers[0].formatter, TextFormatter)

    def test_reinit_does_not_duplicate(self, restore_root_logger):
        setup_logging()
        setup_logging()
        assert len(restore_root_logger.handlers) == 1

    def test_file_handler(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "pdfetch.log"
        setup_logging(log_file=log_file, rotation="1MB", retention=2)
        assert len(restore_root_logger.handlers) == 2
        logging.getLogger("pdfetch.test").warning("written to file")
        for handler in restore_root_logger.handlers:
            handler.flush()
        assert "written to file" in log_file.read_text(encoding="utf-8")
