# src/snapshot/sqlite_store.py — v1
"""SQLite-based snapshot store (SNAPSHOT_BACKEND=sqlite).

Uses stdlib sqlite3 — no external dependency. Each snapshot occupies one
row per slot ("current" or "previous"); rotation is a single transaction, so
a crash never leaves both slots empty.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

from pydantic import TypeAdapter

from pdfetch.core.models import ArticleRecord, ChangeReport
from pdfetch.snapshot.base_snapshot_store import BaseSnapshotStore, SnapshotNotFound

logger = logging.getLogger(__name__)

DB_FILE_NAME = "pdfetch.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS snapshots (
    name TEXT NOT NULL,
    slot TEXT NOT NULL CHECK (slot IN ('current', 'previous')),
    data TEXT NOT NULL,
    article_count INTEGER NOT NULL,
    saved_at TEXT DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (name, slot)
);
CREATE TABLE IF NOT EXISTS reports (
    name TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    saved_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""

_records_adapter = TypeAdapter(list[ArticleRecord])


class SqliteSnapshotStore(BaseSnapshotStore):
    """SQLite-backed snapshot store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def exists(self, name: str) -> bool:
        return self._fetch_slot(name, "current") is not None

    async def load(self, name: str) -> list[ArticleRecord]:
        return self._load_slot(name, "current")

    async def load_previous(self, name: str) -> list[ArticleRecord]:
        return self._load_slot(name, "previous")

    async def save(self, name: str, records: list[ArticleRecord]) -> None:
        data = json.dumps([r.to_json_dict() for r in records], ensure_ascii=False)
        with self._conn:
            self._conn.execute(
                """INSERT OR REPLACE INTO snapshots (name, slot, data, article_count)
                   VALUES (?, 'current', ?, ?)""",
                (name, data, len(records)),
            )
        logger.info("Stored %d article(s) as snapshot %r", len(records), name)

    async def rotate(self, name: str) -> str:
        with self._conn:
            cursor = self._conn.execute(
                "SELECT 1 FROM snapshots WHERE name = ? AND slot = 'current'", (name,)
            )
            if cursor.fetchone() is None:
                raise SnapshotNotFound(name, f"{self._db_path}#{name}")
            self._conn.execute(
                "DELETE FROM snapshots WHERE name = ? AND slot = 'previous'", (name,)
            )
            self._conn.execute(
                "UPDATE snapshots SET slot = 'previous' WHERE name = ? AND slot = 'current'",
                (name,),
            )
        return f"{self._db_path}#{name}.old"

    async def save_report(self, name: str, report: ChangeReport) -> None:
        with self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO reports (name, data) VALUES (?, ?)",
                (name, report.model_dump_json(by_alias=True)),
            )

    async def load_report(self, name: str) -> ChangeReport | None:
        cursor = self._conn.execute("SELECT data FROM reports WHERE name = ?", (name,))
        row = cursor.fetchone()
        if row is None:
            return None
        return ChangeReport.model_validate_json(row[0])

    async def clear(self) -> None:
        with self._conn:
            self._conn.execute("DELETE FROM snapshots")
            self._conn.execute("DELETE FROM reports")

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def _fetch_slot(self, name: str, slot: str) -> str | None:
        cursor = self._conn.execute(
            "SELECT data FROM snapshots WHERE name = ? AND slot = ?", (name, slot)
        )
        row = cursor.fetchone()
        return row[0] if row else None

    def _load_slot(self, name: str, slot: str) -> list[ArticleRecord]:
        data = self._fetch_slot(name, slot)
        if data is None:
            raise SnapshotNotFound(name, f"{self._db_path}#{name}:{slot}")
        return _records_adapter.validate_json(data)
