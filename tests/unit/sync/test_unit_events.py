# tests/unit/sync/test_unit_events.py — v1
"""Tests for sync/events.py — observer forwarding alongside logging."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

from pdfetch.sync.events import EventEmitter


class TestEventEmitter:
    def test_logs_without_observer(self, caplog):
        caplog.set_level(logging.INFO, logger="pdfetch")
        emitter = EventEmitter(logging.getLogger("pdfetch.test"))
        event = emitter.emit("snapshot_saved", "Saved 3 article(s).", count=3)
        assert event.data == {"count": 3}
        assert "Saved 3 article(s)." in caplog.text

    def test_forwards_to_observer(self):
        observer = MagicMock()
        emitter = EventEmitter(logging.getLogger("pdfetch.test"), observer)
        emitter.emit("article_failed", "Failed K1", level=logging.ERROR, number="K1")
        event = observer.call_args.args[0]
        assert event.kind == "article_failed"
        assert event.level == logging.ERROR
        assert event.data["number"] == "K1"

    def test_message_with_percent_sign(self, caplog):
        caplog.set_level(logging.INFO, logger="pdfetch")
        EventEmitter(logging.getLogger("pdfetch.test")).emit("file_deleted", "Deleted 100%.pdf")
        assert "Deleted 100%.pdf" in caplog.text
