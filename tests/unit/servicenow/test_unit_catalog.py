# tests/unit/servicenow/test_unit_catalog.py — v1
"""Tests for servicenow/catalog.py — Table API client over httpx.MockTransport."""

from __future__ import annotations

import httpx
import pytest

from pdfetch.config.settings import Settings
from pdfetch.servicenow.catalog import (
    CatalogFetchError,
    ServiceNowCatalog,
    build_query,
)


def _row(number: str, version: str = "1") -> dict:
    return {
        "sys_id": f"id_{number}",
        "number": number,
        "short_description": f"Article {number}",
        "version": {"display_value": version, "link": "https://acme/v"},
        "sys_updated_on": "2024-05-01 10:00:00",
        "sys_domain": {"display_value": "global", "link": "https://acme/d"},
        "kb_knowledge_base": {"display_value": "IT", "link": "https://acme/kb"},
    }


def _catalog(handler, page_size: int = 2) -> ServiceNowCatalog:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ServiceNowCatalog(
        "acme", "john.doe", "secret", page_size=page_size, max_retries=1, client=client
    )


class TestBuildQuery:
    def test_baseline_only(self):
        assert build_query() == "workflow_state=published^ORDERBYnumber"

    def test_user_filter_narrows(self):
        assert build_query("sys_domain=abc") == (
            "workflow_state=published^sys_domain=abc^ORDERBYnumber"
        )

    def test_strips_separators(self):
        assert build_query(" ^kb_knowledge_base=IT^ ") == (
            "workflow_state=published^kb_knowledge_base=IT^ORDERBYnumber"
        )


class TestServiceNowCatalog:
    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"result": [_row("KB1")]})

        async with _catalog(handler) as catalog:
            records = await catalog.fetch_snapshot("sys_domain=abc")

        assert [r.number for r in records] == ["KB1"]
        request = seen[0]
        assert request.url.host == "acme.service-now.com"
        assert request.url.path == "/api/now/table/kb_knowledge"
        params = request.url.params
        assert params["sysparm_query"] == "workflow_state=published^sys_domain=abc^ORDERBYnumber"
        assert params["sysparm_display_value"] == "true"
        assert params["sysparm_fields"] == (
            "sys_id,number,short_description,version,sys_updated_on,sys_domain,kb_knowledge_base"
        )
        assert params["sysparm_offset"] == "0"

    @pytest.mark.asyncio
    async def test_pages_until_short_page(self):
        pages = {"0": [_row("KB1"), _row("KB2")], "2": [_row("KB3"), _row("KB4")], "4": [_row("KB5")]}
        offsets: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            offset = request.url.params["sysparm_offset"]
            offsets.append(offset)
            return httpx.Response(200, json={"result": pages[offset]})

        async with _catalog(handler) as catalog:
            records = await catalog.fetch_snapshot()
        assert [r.number for r in records] == ["KB1", "KB2", "KB3", "KB4", "KB5"]
        assert offsets == ["0", "2", "4"]

    @pytest.mark.asyncio
    async def test_repeated_identity_dropped(self):
        pages = {"0": [_row("KB1"), _row("KB2")], "2": [_row("KB2")]}

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"result": pages[request.url.params["sysparm_offset"]]})

        async with _catalog(handler) as catalog:
            records = await catalog.fetch_snapshot()
        assert [r.number for r in records] == ["KB1", "KB2"]

    @pytest.mark.asyncio
    async def test_retries_server_error(self, monkeypatch):
        monkeypatch.setattr("pdfetch.servicenow.retry._compute_delay", lambda c, a: 0.0)
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 1:
                return httpx.Response(503)
            return httpx.Response(200, json={"result": []})

        async with _catalog(handler) as catalog:
            assert await catalog.fetch_snapshot() == []
        assert calls["n"] == 2

    @pytest.mark.asyncio
    async def test_auth_failure_raises_fetch_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": {"message": "User Not Authenticated"}})

        async with _catalog(handler) as catalog:
            with pytest.raises(CatalogFetchError, match="acme.service-now"):
                await catalog.fetch_snapshot()

    @pytest.mark.asyncio
    async def test_unexpected_payload(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"records": []})

        async with _catalog(handler) as catalog:
            with pytest.raises(CatalogFetchError, match="result"):
                await catalog.fetch_snapshot()

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>login</html>")

        async with _catalog(handler) as catalog:
            with pytest.raises(CatalogFetchError, match="Invalid JSON"):
                await catalog.fetch_snapshot()

    @pytest.mark.asyncio
    async def test_malformed_row(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"result": [{"number": "KB1"}]})

        async with _catalog(handler) as catalog:
            with pytest.raises(CatalogFetchError, match="Malformed"):
                await catalog.fetch_snapshot()

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"result": []}))
        )
        catalog = ServiceNowCatalog("acme", "u", "p", client=client)
        await catalog.aclose()
        assert client.is_closed is False
        await client.aclose()

    def test_from_settings(self):
        settings = Settings(
            _env_file=None, sn_instance_name="acme.service-now.com",
            sn_user_name="u", sn_pass="p", page_size=50,
        )
        catalog = ServiceNowCatalog.from_settings(settings)
        assert catalog._url == "https://acme.service-now.com/api/now/table/kb_knowledge"
        assert catalog._page_size == 50
