# src/sync/reconciler.py — v1
"""Reconciliation controller — keeps the output folder in step with the catalog.

Operations, from simplest to most complete:

    list_only                 fetch, reset workspace, persist snapshot
    list_with_changes         fetch, diff against the primary, rotate, persist
    list_with_files           fetch, log in, reset workspace, render all, persist
    list_changes_with_files   fetch, diff, log in, delete/render, rotate, persist

Ordering rules:

* The catalog is fetched before anything local is touched, so a fetch failure
  leaves snapshots and PDFs as they were.
* When there is something to render, the browser session is opened (login)
  before any file is deleted, so a login failure mutates nothing.
* The new snapshot and the change report are persisted last. An operation
  interrupted mid-render leaves the previous primary in place, and re-running
  it computes the same changes again.

Two policies for ``list_changes_with_files``:

* full reconcile: PDFs of removed and updated articles are deleted before
  updated and added articles are re-rendered, so after a failed re-render a
  file is absent rather than stale.
* newer-only: the PDFs folder is an inbox. It is emptied and only this run's
  updated and added articles are rendered into it; no targeted deletions.

Per-article render failures are logged and recorded without stopping the
batch. Catalog fetch failures and renderer login failures propagate.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from pdfetch.core.models import ArticleRecord, ChangeReport, OperationResult, RenderSummary
from pdfetch.logging.context import set_article_context
from pdfetch.servicenow.catalog import BaseCatalogClient
from pdfetch.servicenow.renderer import BaseArticleRenderer
from pdfetch.snapshot.base_snapshot_store import BaseSnapshotStore
from pdfetch.storage.layout import CHANGES_NAME, LIST_NAME, OutputLayout
from pdfetch.storage.workspace import empty_pdf_dir, ensure_pdf_dir, remove_pdfs, reset_workspace
from pdfetch.sync.diff import build_change_report
from pdfetch.sync.events import EventEmitter, Observer

logger = logging.getLogger(__name__)


class Reconciler:
    """Runs one operation against one output directory. Create one per invocation."""

    def __init__(
        self,
        store: BaseSnapshotStore,
        catalog: BaseCatalogClient,
        renderer: BaseArticleRenderer,
        layout: OutputLayout,
        *,
        query: str | None = None,
        observer: Observer | None = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._renderer = renderer
        self._layout = layout
        self._query = query
        self._events = EventEmitter(logger, observer)

    # --- Public operations ---

    async def list_only(self) -> OperationResult:
        records = await self._catalog.fetch_snapshot(self._query)
        await self._reset_workspace()
        await self._save_snapshot(records)
        return OperationResult(operation_mode="list", snapshot_size=len(records))

    async def list_with_changes(self) -> OperationResult:
        result = OperationResult(operation_mode="list_changes")
        computed = await self._compute_changes()
        if computed is not None:
            records, report = computed
            await self._commit_changes(records, report)
            result.snapshot_size = len(records)
            result.report = report
        return result

    async def list_with_files(self) -> OperationResult:
        records = await self._catalog.fetch_snapshot(self._query)
        numbers = [r.number for r in records]
        async with self._browser_session(numbers):
            await self._reset_workspace()
            ensure_pdf_dir(self._layout)
            render = await self._render_all(numbers)
        await self._save_snapshot(records)
        return OperationResult(
            operation_mode="list_files", snapshot_size=len(records), render=render
        )

    async def list_changes_with_files(self, newer_only: bool = False) -> OperationResult:
        if not await self._store.exists(LIST_NAME):
            self._events.emit(
                "prerequisite_missing",
                f'No previous "{LIST_NAME}" listing found; listing and downloading everything.',
                level=logging.WARNING,
            )
            result = await self.list_with_files()
            result.operation_mode = "list_changes_files"
            result.fell_back_to_full_listing = True
            return result

        result = OperationResult(operation_mode="list_changes_files")
        computed = await self._compute_changes()
        if computed is None:
            return result
        records, report = computed
        result.snapshot_size = len(records)
        result.report = report
        changes = report.changes

        async with self._browser_session(changes.to_render):
            ensure_pdf_dir(self._layout)
            if newer_only:
                emptied = empty_pdf_dir(self._layout)
                self._events.emit(
                    "inbox_emptied",
                    f"Emptied {self._layout.pdf_dir} ({len(emptied)} file(s)) "
                    "before downloading newer articles.",
                    files=emptied,
                )
                result.deleted = emptied
            else:
                deleted = remove_pdfs(self._layout, changes.to_delete)
                for name in deleted:
                    self._events.emit("file_deleted", f"Deleted {name}.", file=name)
                result.deleted = deleted
            result.render = await self._render_all(changes.to_render)

        await self._commit_changes(records, report)
        return result

    async def render_articles(self, numbers: list[str]) -> RenderSummary:
        """Render ``numbers`` in order on one session; failures do not stop the batch."""
        async with self._browser_session(numbers):
            return await self._render_all(numbers)

    # --- Steps ---

    @asynccontextmanager
    async def _browser_session(self, numbers: list[str]) -> AsyncIterator[None]:
        """Hold a logged-in renderer session, or nothing when there is nothing to render."""
        if not numbers:
            yield
            return
        async with self._renderer:
            yield

    async def _render_all(self, numbers: list[str]) -> RenderSummary:
        summary = RenderSummary()
        if not numbers:
            logger.info("Nothing to download.")
            return summary

        destination = ensure_pdf_dir(self._layout)
        self._events.emit(
            "render_started", f"Downloading {len(numbers)} article(s)...", count=len(numbers)
        )
        for number in numbers:
            set_article_context(number)
            try:
                await self._renderer.render(number, destination)
            except Exception as e:
                summary.failed[number] = str(e) or type(e).__name__
                self._events.emit(
                    "article_failed",
                    f"Failed to download {number}: {e}",
                    level=logging.ERROR,
                    number=number,
                )
            else:
                summary.rendered.append(number)
                self._events.emit("article_rendered", f"Rendered {number}.", number=number)
            finally:
                set_article_context(None)

        logger.info(
            "All done. Fetched %d of %d article(s).", len(summary.rendered), summary.attempted
        )
        return summary

    async def _reset_workspace(self) -> None:
        reset_workspace(self._layout)
        await self._store.clear()
        self._events.emit("workspace_reset", f"Cleared previous output in {self._layout.root}.")

    async def _save_snapshot(self, records: list[ArticleRecord]) -> None:
        await self._store.save(LIST_NAME, records)
        self._events.emit(
            "snapshot_saved", f"Saved {len(records)} article(s) as {LIST_NAME}.", count=len(records)
        )

    async def _compute_changes(self) -> tuple[list[ArticleRecord], ChangeReport] | None:
        """Fetch the catalog and diff it against the primary snapshot. Persists nothing."""
        if not await self._store.exists(LIST_NAME):
            self._events.emit(
                "prerequisite_missing",
                f'No previous "{LIST_NAME}" listing found; cannot compute changes. '
                'Run with operation_mode "list" or "list_files" first.',
                level=logging.WARNING,
            )
            return None

        records = await self._catalog.fetch_snapshot(self._query)
        previous = await self._store.load(LIST_NAME)
        report = build_change_report(previous, records)
        changes = report.changes
        logger.info(
            "Changes: %d added, %d updated, %d removed.",
            len(changes.added), len(changes.updated), len(changes.removed),
        )
        return records, report

    async def _commit_changes(self, records: list[ArticleRecord], report: ChangeReport) -> None:
        """Rotate the primary snapshot, persist the new one and the change report."""
        previous_locator = await self._store.rotate(LIST_NAME)
        self._events.emit(
            "snapshot_rotated", f"Kept previous listing as {previous_locator}.",
            locator=previous_locator,
        )
        await self._save_snapshot(records)
        await self._store.save_report(CHANGES_NAME, report)
        changes = report.changes
        self._events.emit(
            "report_saved",
            f"Saved {CHANGES_NAME}: {len(changes.added)} added, "
            f"{len(changes.updated)} updated, {len(changes.removed)} removed.",
            added=changes.added,
            updated=changes.updated,
            removed=changes.removed,
        )
