# src/export/archive.py — v1
"""Zip the rendered PDFs into ``<output_dir>/<base>.zip``."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

from pdfetch.storage.layout import OutputLayout, pdf_file_name

logger = logging.getLogger(__name__)


def archive_articles(work_dir: Path | str, numbers: list[str], base_name: str) -> Path:
    """Add ``PDFs/<number>.pdf`` for each number to a fresh zip archive.

    Missing files are skipped with a warning. An existing archive with the same
    name is replaced.

    Returns:
        Path of the written archive.
    """
    layout = OutputLayout.at(work_dir)
    output = layout.archive_path(base_name)
    tmp = output.with_name(f"{output.name}.tmp")
    added = 0
    with zipfile.ZipFile(tmp, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        for number in numbers:
            source = layout.pdf_path(number)
            if not source.is_file():
                logger.warning('File "%s" not found; skipped from archive', source)
                continue
            logger.debug('Adding file "%s" to archive...', source.name)
            zf.write(source, arcname=pdf_file_name(number))
            added += 1
    tmp.replace(output)
    logger.info("Archive %s created with %d file(s).", output, added)
    return output
