# tests/conftest.py — v1
"""Shared test fixtures for all unit tests.

Provides article record factories, an in-memory catalog, a renderer that
writes small placeholder PDFs, and output directories under tmp_path.
No network and no browser — all remote I/O is faked.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from pdfetch.config.settings import Settings
from pdfetch.core.models import ArticleRecord
from pdfetch.servicenow.catalog import BaseCatalogClient, CatalogFetchError
from pdfetch.servicenow.renderer import BaseArticleRenderer, RenderError
from pdfetch.snapshot.json_store import JsonSnapshotStore
from pdfetch.storage.layout import OutputLayout

# === Records ===


def _record(number: str, version: str = "1", **fields) -> ArticleRecord:
    data = {
        "sys_id": fields.pop("sys_id", f"id_{number}"),
        "number": number,
        "version": {"display_value": version, "link": f"https://acme/version/{number}"},
        "short_description": fields.pop("title", f"Article {number}"),
        "sys_updated_on": fields.pop("updated_at", "2024-05-01 10:00:00"),
    }
    data.update(fields)
    return ArticleRecord.model_validate(data)


@pytest.fixture
def make_record() -> Callable[..., ArticleRecord]:
    """Factory: make_record("KB001", "2", sys_domain={...})."""
    return _record


# === Fakes ===


class FakeCatalog(BaseCatalogClient):
    """Returns queued snapshots in order; raises when ``fail`` is set."""

    def __init__(self) -> None:
        self.snapshots: list[list[ArticleRecord]] = []
        self.queries: list[str | None] = []
        self.fail = False
        self.closed = False

    async def fetch_snapshot(self, query: str | None = None) -> list[ArticleRecord]:
        self.queries.append(query)
        if self.fail:
            raise CatalogFetchError("instance unreachable")
        return self.snapshots.pop(0)

    async def aclose(self) -> None:
        self.closed = True


class FakeRenderer(BaseArticleRenderer):
    """Writes a tiny PDF per article; numbers in ``failing`` raise."""

    def __init__(self) -> None:
        self.failing: set[str] = set()
        self.login_fails = False
        self.rendered: list[str] = []
        self.sessions = 0
        self.is_open = False

    async def open(self) -> None:
        if self.login_fails:
            raise RenderError("Login to https://acme.service-now.com failed")
        self.sessions += 1
        self.is_open = True

    async def close(self) -> None:
        self.is_open = False

    async def render(self, number: str, destination_dir: Path) -> Path:
        assert self.is_open, "render called outside of a session"
        if number in self.failing:
            raise RuntimeError(f"timeout loading {number}")
        path = Path(destination_dir) / f"{number}.pdf"
        path.write_bytes(_blank_pdf())
        self.rendered.append(number)
        return path


def _blank_pdf() -> bytes:
    from io import BytesIO

    from PyPDF2 import PdfWriter

    writer = PdfWriter()
    writer.add_blank_page(width=595, height=842)
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


@pytest.fixture
def blank_pdf() -> bytes:
    return _blank_pdf()


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


# === Output directory ===


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "acme"
    path.mkdir()
    return path


@pytest.fixture
def layout(output_dir: Path) -> OutputLayout:
    return OutputLayout.at(output_dir)


@pytest.fixture
def json_store(output_dir: Path) -> JsonSnapshotStore:
    return JsonSnapshotStore(output_dir)


@pytest.fixture
def settings(output_dir: Path) -> Settings:
    return Settings(
        _env_file=None,
        output_dir=output_dir,
        sn_instance_name="acme",
        sn_user_name="john.doe",
        sn_pass="letmein",
    )
