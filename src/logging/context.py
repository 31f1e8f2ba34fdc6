# src/logging/context.py — v1
"""Contextual logging support — attach instance, operation, article to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Per-invocation and per-article values attached to every log record.
_instance: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "instance", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)
_article: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "article", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    instance: str | None = None
    operation: str | None = None
    article: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        instance=_instance.get(),
        operation=_operation.get(),
        article=_article.get(),
    )


def set_operation_context(instance: str, operation: str) -> None:
    """Set invocation-level context (called once per operation)."""
    _instance.set(instance)
    _operation.set(operation)


def set_article_context(article: str | None) -> None:
    """Set the article currently being processed (None to unset)."""
    _article.set(article)


def clear_context() -> None:
    """Reset all context variables."""
    _instance.set(None)
    _operation.set(None)
    _article.set(None)
