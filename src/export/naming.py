# src/export/naming.py — v1
"""Base name of the packaging outputs (``<base>.zip`` / ``<base>.pdf``)."""

from __future__ import annotations

from pdfetch.core.models import ArticleRecord

GLOBAL_DOMAIN = "global"


def domain_suffix(record: ArticleRecord | None) -> str:
    """Last ``/``-separated segment of the record's domain, lowercased.

    Returns "" when the record has no domain or is in the global domain.
    """
    if record is None or not record.domain_label:
        return ""
    segment = record.domain_label.rstrip("/").split("/")[-1].strip().lower()
    return "" if segment == GLOBAL_DOMAIN else segment


def package_base_name(instance_name: str, records: list[ArticleRecord]) -> str:
    """``<instance>`` or ``<instance>_<domain>`` based on the first record."""
    suffix = domain_suffix(records[0] if records else None)
    return f"{instance_name}_{suffix}" if suffix else instance_name
