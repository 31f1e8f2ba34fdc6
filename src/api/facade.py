# src/api/facade.py — v1
"""Public API facade — single entry point for one pdfetch operation.

Usage:
    from pdfetch.api.facade import execute
    result = await execute(settings)

``execute`` validates the output directory, takes the session lock, runs the
selected operation mode, applies the storage mode and always releases the
lock. Problems found before the lock is taken raise; failures during the
operation are returned as ``status="failed"``.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable

from pdfetch.config.settings import ConfigurationError, Settings
from pdfetch.core.models import OperationResult
from pdfetch.export.archive import archive_articles
from pdfetch.export.merge import merge_articles
from pdfetch.export.naming import package_base_name
from pdfetch.logging.context import clear_context, set_operation_context
from pdfetch.storage.layout import LIST_NAME, OutputLayout
from pdfetch.storage.session import session
from pdfetch.sync.events import EventEmitter, Observer
from pdfetch.sync.reconciler import Reconciler

if TYPE_CHECKING:
    from pdfetch.servicenow.catalog import BaseCatalogClient
    from pdfetch.servicenow.renderer import BaseArticleRenderer
    from pdfetch.snapshot.base_snapshot_store import BaseSnapshotStore

logger = logging.getLogger(__name__)

OperationFn = Callable[[Reconciler, Settings], Awaitable[OperationResult]]

OPERATION_MODES: dict[str, OperationFn] = {
    "list": lambda r, s: r.list_only(),
    "list_changes": lambda r, s: r.list_with_changes(),
    "list_files": lambda r, s: r.list_with_files(),
    "list_changes_files": lambda r, s: r.list_changes_with_files(newer_only=s.newer_only),
}


def validate_output_dir(settings: Settings) -> OutputLayout:
    """Check mandatory settings and that the output directory already exists.

    Raises:
        ConfigurationError: If a mandatory setting is missing or the
            directory does not exist.
    """
    missing = settings.missing_mandatory()
    if missing:
        raise ConfigurationError(
            "Missing mandatory setting(s): " + ", ".join(f'"{m}"' for m in missing)
        )
    output_dir = Path(settings.output_dir).expanduser()  # type: ignore[arg-type]
    if not output_dir.is_dir():
        raise ConfigurationError(f'Output directory "{output_dir}" does not exist.')
    return OutputLayout.at(output_dir)


async def execute(
    settings: Settings,
    observer: Observer | None = None,
    catalog: BaseCatalogClient | None = None,
    renderer: BaseArticleRenderer | None = None,
    store: BaseSnapshotStore | None = None,
) -> OperationResult:
    """Run the configured operation mode against the output directory.

    Args:
        settings: Merged settings for this invocation.
        observer: Optional callback receiving every SyncEvent.
        catalog: Catalog client. ServiceNowCatalog from settings if None.
        renderer: Article renderer. PlaywrightRenderer from settings if None.
        store: Snapshot store. Configured backend if None.

    Returns:
        OperationResult describing what was done.

    Raises:
        ConfigurationError: Invalid configuration (nothing mutated).
        SessionLockedError: Another session holds the directory (nothing mutated).
    """
    layout = validate_output_dir(settings)
    operation = OPERATION_MODES[settings.operation_mode]

    with session(layout):
        set_operation_context(settings.sn_instance_name, settings.operation_mode)
        owned_catalog = catalog is None
        if catalog is None:
            from pdfetch.servicenow.catalog import ServiceNowCatalog
            catalog = ServiceNowCatalog.from_settings(settings)
        if renderer is None:
            from pdfetch.servicenow.renderer import create_renderer
            renderer = create_renderer(settings)
        owned_store = store is None
        if store is None:
            from pdfetch.snapshot.store_factory import create_snapshot_store
            store = create_snapshot_store(settings, layout.root)

        logger.info(
            'Starting "%s" on "%s" (storage mode "%s")',
            settings.operation_mode, layout.root, settings.storage_mode,
        )
        reconciler = Reconciler(
            store, catalog, renderer, layout, query=settings.sn_query, observer=observer
        )
        try:
            result = await operation(reconciler, settings)
            result.storage_mode = settings.storage_mode
            result.package_path = await _apply_storage_mode(
                settings, store, layout, EventEmitter(logger, observer)
            )
        except Exception as e:
            logger.error("Operation %s failed: %s", settings.operation_mode, e, exc_info=True)
            result = OperationResult(
                operation_mode=settings.operation_mode,
                storage_mode=settings.storage_mode,
                status="failed",
                error=f"{type(e).__name__}: {e}",
            )
        finally:
            if owned_catalog:
                await catalog.aclose()
            close = getattr(store, "close", None)
            if owned_store and callable(close):
                close()
            clear_context()

    logger.info(
        "Finished %s: %s, %d article(s) listed, %d rendered, %d failed",
        result.operation_mode, result.status, result.snapshot_size,
        len(result.render.rendered), len(result.render.failed),
    )
    return result


async def _apply_storage_mode(
    settings: Settings,
    store: BaseSnapshotStore,
    layout: OutputLayout,
    events: EventEmitter,
) -> str | None:
    """Package the PDFs of the primary snapshot as requested by the storage mode."""
    if settings.storage_mode == "files":
        return None
    if not await store.exists(LIST_NAME):
        events.emit(
            "package_skipped",
            f'No "{LIST_NAME}" listing available; nothing to package.',
            level=logging.WARNING,
        )
        return None

    records = await store.load(LIST_NAME)
    numbers = [r.number for r in records]
    base_name = package_base_name(settings.sn_instance_name, records)

    if settings.storage_mode == "archived_files":
        path = await asyncio.to_thread(archive_articles, layout.root, numbers, base_name)
    else:
        path = await asyncio.to_thread(merge_articles, layout.root, numbers, base_name)

    if path is None:
        events.emit(
            "package_skipped", "No PDF could be packaged.", level=logging.WARNING
        )
        return None
    events.emit("package_written", f"Wrote {path}.", path=str(path))
    return str(path)
