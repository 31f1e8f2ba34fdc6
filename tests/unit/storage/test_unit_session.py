# tests/unit/storage/test_unit_session.py — v1
"""Tests for storage/session.py — advisory lock file."""

from __future__ import annotations

import uuid

import pytest

from pdfetch.storage.session import (
    SessionLockedError,
    close_session,
    open_session,
    session,
)


class TestSessionLock:
    def test_open_writes_uuid(self, layout):
        token = open_session(layout)
        assert layout.lock_path.read_text(encoding="utf-8") == token
        assert uuid.UUID(token).version == 4

    def test_second_open_is_refused(self, layout):
        open_session(layout)
        assert layout.lock_path.exists()
        with pytest.raises(SessionLockedError, match="already open"):
            open_session(layout)

    def test_close(self, layout):
        open_session(layout)
        assert close_session(layout) is True
        assert not layout.lock_path.exists()

    def test_close_without_lock(self, layout):
        assert close_session(layout) is False

    def test_context_manager_releases_on_error(self, layout):
        with pytest.raises(RuntimeError):
            with session(layout):
                assert layout.lock_path.exists()
                raise RuntimeError("boom")
        assert not layout.lock_path.exists()

    def test_context_manager_does_not_touch_foreign_lock(self, layout):
        layout.lock_path.write_text("someone-else")
        with pytest.raises(SessionLockedError):
            with session(layout):
                pass
        assert layout.lock_path.read_text() == "someone-else"
