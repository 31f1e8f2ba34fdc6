# src/export/merge.py — v1
"""Concatenate the rendered PDFs into ``<output_dir>/<base>.pdf``."""

from __future__ import annotations

import logging
from pathlib import Path

from PyPDF2 import PdfReader, PdfWriter
from PyPDF2.errors import PdfReadError

from pdfetch.storage.layout import OutputLayout

logger = logging.getLogger(__name__)


def merge_articles(work_dir: Path | str, numbers: list[str], base_name: str) -> Path | None:
    """Append every page of ``PDFs/<number>.pdf`` in ``numbers`` order.

    Missing or unreadable files are skipped with a warning. Nothing is
    written when no file could be merged.

    Returns:
        Path of the merged PDF, or None if nothing was merged.
    """
    layout = OutputLayout.at(work_dir)
    writer = PdfWriter()
    merged = 0
    for number in numbers:
        source = layout.pdf_path(number)
        if not source.is_file():
            logger.warning('File "%s" not found; skipped from merged PDF', source)
            continue
        try:
            reader = PdfReader(str(source))
            for page in reader.pages:
                writer.add_page(page)
        except PdfReadError as e:
            logger.warning('Could not read "%s"; skipped from merged PDF: %s', source, e)
            continue
        logger.debug('Adding file "%s" to merged PDF...', source.name)
        merged += 1

    if not merged:
        logger.warning('Found no actual PDFs to merge. Check your "operation_mode".')
        return None

    output = layout.merged_path(base_name)
    with open(output, "wb") as fh:
        writer.write(fh)
    logger.info("Merged %d file(s) into %s.", merged, output)
    return output
