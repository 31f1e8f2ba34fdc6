# src/servicenow/catalog.py — v1
"""Catalog access — list published KB articles through the ServiceNow Table API.

    GET https://<instance>.service-now.com/api/now/table/kb_knowledge
        ?sysparm_query=workflow_state=published[^<query>]^ORDERBYnumber
        &sysparm_display_value=true
        &sysparm_fields=sys_id,number,short_description,version,...
        &sysparm_limit=<page_size>&sysparm_offset=<n>

The ``workflow_state=published`` baseline can be narrowed by the user query
but never removed.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import ValidationError

from pdfetch.config.settings import Settings, instance_url
from pdfetch.core.models import ArticleRecord
from pdfetch.servicenow.retry import RetryExhausted, default_retry_configs, with_retry

logger = logging.getLogger(__name__)

TABLE_PATH = "/api/now/table/kb_knowledge"
BASELINE_QUERY = "workflow_state=published"
ORDER_CLAUSE = "ORDERBYnumber"
FIELDS = (
    "sys_id",
    "number",
    "short_description",
    "version",
    "sys_updated_on",
    "sys_domain",
    "kb_knowledge_base",
)


class CatalogFetchError(Exception):
    """Raised when the article list cannot be obtained."""


def build_query(user_query: str | None = None) -> str:
    """Combine the baseline filter, an optional user filter and the ordering."""
    parts = [BASELINE_QUERY]
    extra = (user_query or "").strip().strip("^")
    if extra:
        parts.append(extra)
    parts.append(ORDER_CLAUSE)
    return "^".join(parts)


class BaseCatalogClient(ABC):
    """Source of catalog snapshots."""

    @abstractmethod
    async def fetch_snapshot(self, query: str | None = None) -> list[ArticleRecord]:
        """Return every published article matching ``query``, in catalog order.

        Raises:
            CatalogFetchError: If the listing cannot be completed.
        """

    async def aclose(self) -> None:
        """Release any held resources."""

    async def __aenter__(self) -> BaseCatalogClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class ServiceNowCatalog(BaseCatalogClient):
    """httpx-based Table API client."""

    def __init__(
        self,
        instance_name: str,
        user_name: str,
        password: str,
        *,
        page_size: int = 500,
        timeout_s: float = 60.0,
        max_retries: int = 3,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._instance = instance_name
        self._url = f"{instance_url(instance_name)}{TABLE_PATH}"
        self._page_size = page_size
        self._retry_configs = default_retry_configs(max_retries)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            auth=httpx.BasicAuth(user_name, password),
            timeout=timeout_s,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, client: httpx.AsyncClient | None = None
    ) -> ServiceNowCatalog:
        return cls(
            settings.sn_instance_name,
            settings.sn_user_name,
            settings.sn_pass,
            page_size=settings.page_size,
            timeout_s=settings.request_timeout_s,
            max_retries=settings.fetch_max_retries,
            client=client,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch_snapshot(self, query: str | None = None) -> list[ArticleRecord]:
        sysparm_query = build_query(query)
        logger.info(
            'Listing articles from "%s.service-now" that match query: "%s"...',
            self._instance, sysparm_query,
        )

        records: list[ArticleRecord] = []
        seen: set[str] = set()
        offset = 0
        while True:
            rows = await self._fetch_page(sysparm_query, offset)
            for row in rows:
                record = self._to_record(row)
                if record.identity in seen:
                    logger.warning(
                        "Skipping repeated article %s (%s) returned while paging",
                        record.number, record.identity,
                    )
                    continue
                seen.add(record.identity)
                logger.debug(
                    'Processing article "%s v%s - %s"...',
                    record.number, record.version_label, record.title,
                )
                records.append(record)
            if len(rows) < self._page_size:
                break
            offset += self._page_size

        logger.info("All done. Processed %d article(s).", len(records))
        return records

    async def _fetch_page(self, sysparm_query: str, offset: int) -> list[dict[str, Any]]:
        params = {
            "sysparm_query": sysparm_query,
            "sysparm_display_value": "true",
            "sysparm_fields": ",".join(FIELDS),
            "sysparm_limit": str(self._page_size),
            "sysparm_offset": str(offset),
        }
        try:
            response = await with_retry(
                self._get,
                params,
                operation=f"list kb_knowledge @ {self._instance} offset {offset}",
                retry_configs=self._retry_configs,
            )
        except RetryExhausted as e:
            raise CatalogFetchError(
                f'Error listing articles from "{self._instance}.service-now". '
                f"Details: {e.last_error}"
            ) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise CatalogFetchError(
                f"Invalid JSON returned by {response.request.url}"
            ) from e
        rows = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            raise CatalogFetchError(
                f"Unexpected response shape from {response.request.url}: no 'result' list"
            )
        return rows

    async def _get(self, params: dict[str, str]) -> httpx.Response:
        response = await self._client.get(self._url, params=params)
        response.raise_for_status()
        return response

    @staticmethod
    def _to_record(row: dict[str, Any]) -> ArticleRecord:
        try:
            return ArticleRecord.model_validate(row)
        except ValidationError as e:
            raise CatalogFetchError(f"Malformed article row {row.get('number')!r}: {e}") from e
