# src/sync/diff.py — v1
"""Diff engine — three-way classification of two catalog snapshots.

Records are joined on ``identity`` (sys_id), never on ``number``. Buckets
keep snapshot order: added/updated follow the new snapshot, removed follows
the old one. Pure functions, no I/O.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pdfetch.core.models import ArticleRecord, ChangeReport, ChangeSet

logger = logging.getLogger(__name__)


def index_by_identity(records: list[ArticleRecord]) -> dict[str, ArticleRecord]:
    """Map identity -> record, keeping first-seen order."""
    index: dict[str, ArticleRecord] = {}
    for record in records:
        if record.identity in index:
            logger.warning(
                "Duplicate identity %s (%s) in snapshot; keeping the last one",
                record.identity, record.number,
            )
        index[record.identity] = record
    return index


def diff_snapshots(
    old: list[ArticleRecord], new: list[ArticleRecord]
) -> ChangeSet:
    """Classify every identity difference between ``old`` and ``new``."""
    old_index = index_by_identity(old)
    new_index = index_by_identity(new)
    changes = ChangeSet()

    for identity, article in new_index.items():
        previous = old_index.get(identity)
        if previous is None:
            changes.added.append(article.number)
            logger.info("Article %s added.", article.number)
        elif article.version_label != previous.version_label:
            changes.updated.append(article.number)
            logger.info(
                "Article %s updated from version %r to %r.",
                article.number, previous.version_label, article.version_label,
            )

    for identity, article in old_index.items():
        if identity not in new_index:
            changes.removed.append(article.number)
            logger.info("Article %s removed.", article.number)

    return changes


def build_change_report(
    old: list[ArticleRecord],
    new: list[ArticleRecord],
    computed_at: datetime | None = None,
) -> ChangeReport:
    """Diff two snapshots and stamp the result."""
    return ChangeReport(
        computed_at=computed_at or datetime.now(timezone.utc),
        changes=diff_snapshots(old, new),
    )
