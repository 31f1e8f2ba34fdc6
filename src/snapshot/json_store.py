# src/snapshot/json_store.py — v1
"""JSON file-based snapshot store (default SNAPSHOT_BACKEND=json).

Layout inside the output directory:
    {name}.json       primary snapshot (tab-indented array)
    {name}.json.old   previous snapshot, produced by rotate()
    {report}.json     change report
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import TypeAdapter

from pdfetch.core.models import ArticleRecord, ChangeReport
from pdfetch.snapshot.base_snapshot_store import BaseSnapshotStore, SnapshotNotFound

logger = logging.getLogger(__name__)

PREVIOUS_SUFFIX = ".old"

_records_adapter = TypeAdapter(list[ArticleRecord])


class JsonSnapshotStore(BaseSnapshotStore):
    """Snapshot store writing plain JSON files next to the PDFs folder."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser()

    @property
    def root(self) -> Path:
        return self._root

    def snapshot_path(self, name: str) -> Path:
        return self._root / f"{name}.json"

    def previous_path(self, name: str) -> Path:
        return self._root / f"{name}.json{PREVIOUS_SUFFIX}"

    async def exists(self, name: str) -> bool:
        return self.snapshot_path(name).is_file()

    async def load(self, name: str) -> list[ArticleRecord]:
        return self._read_records(name, self.snapshot_path(name))

    async def load_previous(self, name: str) -> list[ArticleRecord]:
        return self._read_records(name, self.previous_path(name))

    async def save(self, name: str, records: list[ArticleRecord]) -> None:
        payload = json.dumps(
            [r.to_json_dict() for r in records], indent="\t", ensure_ascii=False
        )
        path = self.snapshot_path(name)
        _write_atomic(path, payload)
        logger.info("Wrote %d article(s) to %s", len(records), path)

    async def rotate(self, name: str) -> str:
        current = self.snapshot_path(name)
        if not current.is_file():
            raise SnapshotNotFound(name, str(current))
        previous = self.previous_path(name)
        os.replace(current, previous)
        logger.debug("Rotated %s -> %s", current, previous)
        return str(previous)

    async def save_report(self, name: str, report: ChangeReport) -> None:
        path = self.snapshot_path(name)
        _write_atomic(path, json.dumps(report.to_json_dict(), indent=2))
        logger.info("Changes written to %s", path)

    async def load_report(self, name: str) -> ChangeReport | None:
        path = self.snapshot_path(name)
        if not path.is_file():
            return None
        return ChangeReport.model_validate_json(path.read_text(encoding="utf-8"))

    async def clear(self) -> None:
        if not self._root.is_dir():
            return
        for path in self._root.glob("*.json*"):
            if path.is_file():
                path.unlink()
                logger.debug("Deleted %s", path)

    def _read_records(self, name: str, path: Path) -> list[ArticleRecord]:
        if not path.is_file():
            raise SnapshotNotFound(name, str(path))
        logger.info("Loading articles from %s", path)
        return _records_adapter.validate_json(path.read_bytes())


def _write_atomic(path: Path, content: str) -> None:
    """Write next to the target, then swap it in with a single rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.tmp")
    tmp.write_text(content, encoding="utf-8")
    os.replace(tmp, path)
