# src/snapshot/store_factory.py — v1
"""Factory for snapshot store instantiation."""

from __future__ import annotations

from pathlib import Path

from pdfetch.config.settings import Settings
from pdfetch.snapshot.base_snapshot_store import BaseSnapshotStore


def create_snapshot_store(
    settings: Settings | None = None,
    output_dir: Path | str | None = None,
) -> BaseSnapshotStore:
    """Instantiate the configured snapshot backend.

    Args:
        settings: Application settings. Defaults to JSON backend.
        output_dir: Directory holding the snapshots. Defaults to
            ``settings.output_dir``.

    Returns:
        Configured BaseSnapshotStore implementation.
    """
    backend = "json" if settings is None else settings.snapshot_backend
    root = output_dir if output_dir is not None else (
        settings.output_dir if settings is not None else None
    )
    if root is None:
        raise ValueError("An output directory is required to locate snapshots")

    if backend == "json":
        from pdfetch.snapshot.json_store import JsonSnapshotStore
        return JsonSnapshotStore(root=root)

    if backend == "sqlite":
        from pdfetch.snapshot.sqlite_store import DB_FILE_NAME, SqliteSnapshotStore
        return SqliteSnapshotStore(db_path=Path(root) / DB_FILE_NAME)

    raise ValueError(f"Unsupported snapshot backend: {backend!r}")
