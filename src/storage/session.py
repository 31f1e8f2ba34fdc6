# src/storage/session.py — v1
"""Advisory single-writer session lock on an output directory.

The lock is the file ``operation_in_progress.lock`` holding a uuid4. It is
released on normal completion and on error paths, but not if the process is
killed: a leftover lock must then be removed by hand.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from pdfetch.storage.layout import OutputLayout

logger = logging.getLogger(__name__)


class SessionLockedError(Exception):
    """Raised when another session already holds the output directory."""

    def __init__(self, lock_path: str) -> None:
        self.lock_path = lock_path
        super().__init__(
            f"A session is already open for this directory (lock file {lock_path}). "
            "If no other pdfetch process is running, delete the lock file."
        )


def open_session(layout: OutputLayout) -> str:
    """Create the lock file; returns the session token.

    Raises:
        SessionLockedError: If the lock file already exists.
    """
    token = str(uuid.uuid4())
    try:
        # "x" fails if the file already exists.
        with layout.lock_path.open("x", encoding="utf-8") as fh:
            fh.write(token)
    except FileExistsError as e:
        raise SessionLockedError(str(layout.lock_path)) from e
    logger.info("Session opened in %s.", layout.root)
    return token


def close_session(layout: OutputLayout) -> bool:
    """Remove the lock file; returns False if there was none."""
    if not layout.lock_path.exists():
        logger.warning("No lock file found in %s. Nothing to close.", layout.root)
        return False
    layout.lock_path.unlink()
    logger.info("Session closed in %s.", layout.root)
    return True


@contextmanager
def session(layout: OutputLayout) -> Iterator[str]:
    """Hold the lock for the duration of the block, releasing it on any exit."""
    token = open_session(layout)
    try:
        yield token
    finally:
        close_session(layout)
