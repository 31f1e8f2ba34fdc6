# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types — all imports come from core.models.
Snapshot records keep the ServiceNow field names on disk (``sys_id``,
``short_description``...) so that lists written by earlier releases stay
readable.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


# === ARTICLE RECORDS ===


class DisplayRef(BaseModel):
    """Reference field as returned with ``sysparm_display_value=true``."""

    model_config = ConfigDict(extra="allow")

    display_value: str = ""
    link: str | None = None


def _coerce_display_ref(value: Any) -> Any:
    """Accept ServiceNow's reference object, a bare string, or nothing."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return {"display_value": value}
    return value


class ArticleRecord(BaseModel):
    """One KB article as observed at snapshot time.

    ``identity`` is the join key for diffing; ``number`` only names files and
    appears in reports.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    identity: str = Field(alias="sys_id")
    number: str
    version: DisplayRef | None = None
    title: str = Field(default="", alias="short_description")
    knowledge_base: DisplayRef | None = Field(default=None, alias="kb_knowledge_base")
    domain: DisplayRef | None = Field(default=None, alias="sys_domain")
    updated_at: str = Field(default="", alias="sys_updated_on")
    updated_at_msecs: int | None = Field(default=None, alias="sys_updated_on_msecs")

    @field_validator("version", "knowledge_base", "domain", mode="before")
    @classmethod
    def coerce_reference(cls, v: Any) -> Any:  # noqa: N805
        return _coerce_display_ref(v)

    @model_validator(mode="after")
    def fill_updated_msecs(self) -> ArticleRecord:
        """Derive the epoch representation when only the display form is known."""
        if self.updated_at_msecs is None and self.updated_at:
            self.updated_at_msecs = parse_updated_on(self.updated_at)
        return self

    @property
    def version_label(self) -> str:
        """Display form of the version; the sole "updated" signal."""
        return self.version.display_value if self.version else ""

    @property
    def domain_label(self) -> str:
        return self.domain.display_value.strip() if self.domain else ""

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with the persisted (ServiceNow) key names."""
        return self.model_dump(mode="json", by_alias=True)


def parse_updated_on(value: str) -> int | None:
    """Convert a ``sys_updated_on`` display value to epoch milliseconds.

    Naive timestamps are read as UTC. Returns None when the instance uses a
    display format we cannot parse.
    """
    text = value.strip()
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y/%m/%d %H:%M:%S", "%d-%m-%Y %H:%M:%S"):
        try:
            parsed = datetime.strptime(text, fmt)
            break
        except ValueError:
            continue
    else:
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Unparseable sys_updated_on value: %r", value)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


# === CHANGE TRACKING ===


class ChangeSet(BaseModel):
    """Three-way classification of article numbers between two snapshots."""

    added: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.updated or self.removed)

    @property
    def to_render(self) -> list[str]:
        """Numbers that need a fresh PDF: updated first, then added."""
        return [*self.updated, *self.added]

    @property
    def to_delete(self) -> list[str]:
        """Numbers whose local PDF is stale: removed first, then updated."""
        return [*self.removed, *self.updated]


class ChangeReport(BaseModel):
    """Persisted result of a diff, written to ``file_changes.json``."""

    model_config = ConfigDict(populate_by_name=True)

    computed_at: datetime = Field(alias="last_updated_on")
    changes: ChangeSet = Field(default_factory=ChangeSet)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# === OPERATION RESULTS ===


OperationMode = Literal["list", "list_changes", "list_files", "list_changes_files"]
StorageMode = Literal["files", "archived_files", "single_file"]


class RenderSummary(BaseModel):
    """Outcome of a best-effort render batch."""

    rendered: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)

    @property
    def attempted(self) -> int:
        return len(self.rendered) + len(self.failed)


class OperationResult(BaseModel):
    """What one invocation did to the output directory."""

    operation_mode: OperationMode
    storage_mode: StorageMode = "files"
    status: Literal["completed", "failed"] = "completed"
    snapshot_size: int = 0
    report: ChangeReport | None = None
    fell_back_to_full_listing: bool = False
    deleted: list[str] = Field(default_factory=list)
    render: RenderSummary = Field(default_factory=RenderSummary)
    package_path: str | None = None
    error: str | None = None
