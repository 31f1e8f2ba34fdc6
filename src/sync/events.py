# src/sync/events.py — v1
"""Progress events for callers that want more than log lines.

Every event is also written to the module logger, so an observer is optional.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Literal

EventKind = Literal[
    "workspace_reset",
    "snapshot_saved",
    "snapshot_rotated",
    "prerequisite_missing",
    "report_saved",
    "file_deleted",
    "inbox_emptied",
    "render_started",
    "article_rendered",
    "article_failed",
    "package_written",
    "package_skipped",
]


@dataclass(frozen=True)
class SyncEvent:
    """One notable step of an operation."""

    kind: EventKind
    message: str
    level: int = logging.INFO
    data: dict[str, Any] = field(default_factory=dict)


Observer = Callable[[SyncEvent], None]


class EventEmitter:
    """Logs each event and forwards it to the optional observer."""

    def __init__(self, logger: logging.Logger, observer: Observer | None = None) -> None:
        self._logger = logger
        self._observer = observer

    def emit(
        self,
        kind: EventKind,
        message: str,
        level: int = logging.INFO,
        **data: Any,
    ) -> SyncEvent:
        event = SyncEvent(kind=kind, message=message, level=level, data=data)
        self._logger.log(level, message, extra={"data": data} if data else None)
        if self._observer is not None:
            self._observer(event)
        return event
