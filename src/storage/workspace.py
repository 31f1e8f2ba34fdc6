# src/storage/workspace.py — v1
"""Local file mutations on the output directory: reset, PDF folder, deletions."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from pdfetch.storage.layout import LOCK_FILE_NAME, WORKSPACE_PATTERNS, OutputLayout

logger = logging.getLogger(__name__)


def remove_matching(folder: Path, patterns: tuple[str, ...] | list[str]) -> list[Path]:
    """Delete every entry of ``folder`` matching one of the glob ``patterns``.

    Folders are removed recursively. The session lock is never removed.
    Returns the deleted paths.
    """
    if not folder.is_dir():
        return []
    targets: dict[Path, None] = {}
    for pattern in patterns:
        for match in folder.glob(pattern):
            if match.name != LOCK_FILE_NAME:
                targets[match] = None

    deleted: list[Path] = []
    for path in targets:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
        logger.debug('Deleted: "%s"', path)
        deleted.append(path)
    logger.debug('Done clearing matching content of folder "%s".', folder)
    return deleted


def reset_workspace(layout: OutputLayout) -> list[Path]:
    """Remove snapshots, reports, PDFs and packages from the output directory."""
    return remove_matching(layout.root, WORKSPACE_PATTERNS)


def ensure_pdf_dir(layout: OutputLayout) -> Path:
    """Create ``PDFs/`` on demand."""
    layout.pdf_dir.mkdir(parents=True, exist_ok=True)
    return layout.pdf_dir


def empty_pdf_dir(layout: OutputLayout) -> list[str]:
    """Delete every file of the PDFs inbox; returns the deleted file names."""
    if not layout.pdf_dir.is_dir():
        return []
    return [p.name for p in remove_matching(layout.pdf_dir, ("*",))]


def remove_pdfs(layout: OutputLayout, numbers: list[str]) -> list[str]:
    """Delete ``<number>.pdf`` for each number; returns the names actually removed."""
    removed: list[str] = []
    for number in numbers:
        path = layout.pdf_path(number)
        if path.is_file():
            path.unlink()
            logger.info("Deleted outdated file %s", path.name)
            removed.append(path.name)
        else:
            logger.debug("No local file for %s; nothing to delete", number)
    return removed
