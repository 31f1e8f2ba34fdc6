# tests/unit/servicenow/test_unit_retry.py — v1
"""Tests for servicenow/retry.py — error classification and backoff."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from pdfetch.servicenow.retry import (
    RetryConfig,
    RetryExhausted,
    classify_error,
    with_retry,
)

URL = "https://acme.service-now.com/api/now/table/kb_knowledge"


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", URL)
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


NO_DELAY = {
    "rate_limit": RetryConfig(max_retries=2, base_delay_s=0.0, jitter=False),
    "server_error": RetryConfig(max_retries=2, base_delay_s=0.0, jitter=False),
    "timeout": RetryConfig(max_retries=2, base_delay_s=0.0, jitter=False),
    "network": RetryConfig(max_retries=2, base_delay_s=0.0, jitter=False),
}


class TestClassifyError:
    def test_rate_limit(self):
        assert classify_error(_status_error(429)) == "rate_limit"

    def test_server_error(self):
        assert classify_error(_status_error(503)) == "server_error"

    def test_auth(self):
        assert classify_error(_status_error(401)) == "auth"

    def test_client_error(self):
        assert classify_error(_status_error(400)) == "client_error"

    def test_timeout(self):
        assert classify_error(httpx.ReadTimeout("slow")) == "timeout"

    def test_network(self):
        assert classify_error(httpx.ConnectError("refused")) == "network"

    def test_unknown(self):
        assert classify_error(ValueError("x")) == "unknown"


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_success_first_try(self):
        fn = AsyncMock(return_value="ok")
        assert await with_retry(fn, 1, retry_configs=NO_DELAY) == "ok"
        fn.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_retries_transient_then_succeeds(self):
        fn = AsyncMock(side_effect=[_status_error(503), httpx.ConnectError("x"), "ok"])
        assert await with_retry(fn, retry_configs=NO_DELAY) == "ok"
        assert fn.await_count == 3

    @pytest.mark.asyncio
    async def test_exhausted(self):
        fn = AsyncMock(side_effect=_status_error(500))
        with pytest.raises(RetryExhausted) as exc_info:
            await with_retry(fn, operation="list", retry_configs=NO_DELAY)
        assert exc_info.value.attempts == 3
        assert exc_info.value.error_type == "server_error"

    @pytest.mark.asyncio
    async def test_auth_not_retried(self):
        fn = AsyncMock(side_effect=_status_error(401))
        with pytest.raises(RetryExhausted) as exc_info:
            await with_retry(fn, retry_configs=NO_DELAY)
        assert exc_info.value.attempts == 1
        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_non_http_errors_propagate(self):
        fn = AsyncMock(side_effect=KeyError("boom"))
        with pytest.raises(KeyError):
            await with_retry(fn, retry_configs=NO_DELAY)

    @pytest.mark.asyncio
    async def test_backoff_sleeps(self):
        fn = AsyncMock(side_effect=[_status_error(429), "ok"])
        configs = {"rate_limit": RetryConfig(max_retries=1, base_delay_s=2.0, jitter=False)}
        with patch("pdfetch.servicenow.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            await with_retry(fn, retry_configs=configs)
        sleep.assert_awaited_once_with(2.0)
