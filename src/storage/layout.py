# src/storage/layout.py — v1
"""Output directory structure definition.

Everything pdfetch writes lives directly in the user-supplied output
directory::

    {output_dir}/
        file_list.json             primary snapshot (JSON backend)
        file_list.json.old         previous snapshot
        file_changes.json          change report
        pdfetch.db                 snapshots + report (SQLite backend)
        operation_in_progress.lock session marker
        PDFs/{number}.pdf          rendered articles
        {base}.zip / {base}.pdf    packaging outputs
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# Snapshot / report names handed to the snapshot store.
LIST_NAME = "file_list"
CHANGES_NAME = "file_changes"

PDF_DIR = "PDFs"
PDF_SUFFIX = ".pdf"
ARCHIVE_SUFFIX = ".zip"
LOCK_FILE_NAME = "operation_in_progress.lock"

# Globs removed by a workspace reset (relative to the output directory).
WORKSPACE_PATTERNS: tuple[str, ...] = (PDF_DIR, "*.json*", "*.pdf", "*.zip")


def pdf_file_name(number: str) -> str:
    return f"{number}{PDF_SUFFIX}"


@dataclass(frozen=True)
class OutputLayout:
    """Path conventions rooted at one output directory."""

    root: Path

    @classmethod
    def at(cls, output_dir: Path | str) -> OutputLayout:
        return cls(Path(output_dir).expanduser())

    @property
    def pdf_dir(self) -> Path:
        return self.root / PDF_DIR

    @property
    def lock_path(self) -> Path:
        return self.root / LOCK_FILE_NAME

    def pdf_path(self, number: str) -> Path:
        """Return ``PDFs/<number>.pdf``."""
        return self.pdf_dir / pdf_file_name(number)

    def archive_path(self, base_name: str) -> Path:
        return self.root / f"{base_name}{ARCHIVE_SUFFIX}"

    def merged_path(self, base_name: str) -> Path:
        return self.root / f"{base_name}{PDF_SUFFIX}"

    def existing_pdfs(self) -> set[str]:
        """Article numbers that currently have a PDF in the inbox."""
        if not self.pdf_dir.is_dir():
            return set()
        return {p.stem for p in self.pdf_dir.glob(f"*{PDF_SUFFIX}") if p.is_file()}
