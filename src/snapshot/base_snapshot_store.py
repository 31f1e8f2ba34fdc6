# src/snapshot/base_snapshot_store.py — v1
"""Abstract snapshot store interface.

A store keeps, per snapshot name, a primary snapshot, the previous
(rotated) snapshot, and the change report computed between them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pdfetch.core.models import ArticleRecord, ChangeReport


class SnapshotNotFound(Exception):
    """Raised when a snapshot is requested but was never written."""

    def __init__(self, name: str, locator: str | None = None) -> None:
        self.name = name
        self.locator = locator
        where = f" ({locator})" if locator else ""
        super().__init__(f"Snapshot {name!r} not found{where}")


class BaseSnapshotStore(ABC):
    """Unified interface for snapshot storage backends."""

    @abstractmethod
    async def exists(self, name: str) -> bool:
        """Whether a primary snapshot exists under ``name``."""

    @abstractmethod
    async def load(self, name: str) -> list[ArticleRecord]:
        """Load the primary snapshot. Raises SnapshotNotFound."""

    @abstractmethod
    async def load_previous(self, name: str) -> list[ArticleRecord]:
        """Load the rotated snapshot. Raises SnapshotNotFound."""

    @abstractmethod
    async def save(self, name: str, records: list[ArticleRecord]) -> None:
        """Persist the full ordered snapshot, replacing the primary one."""

    @abstractmethod
    async def rotate(self, name: str) -> str:
        """Move the primary snapshot to the previous slot.

        Returns a locator for the previous snapshot. Raises SnapshotNotFound
        when there is no primary snapshot.
        """

    @abstractmethod
    async def save_report(self, name: str, report: ChangeReport) -> None:
        """Persist a change report, replacing any earlier one."""

    @abstractmethod
    async def load_report(self, name: str) -> ChangeReport | None:
        """Load a change report, or None if none was written."""

    @abstractmethod
    async def clear(self) -> None:
        """Drop every snapshot and report held by this store."""
