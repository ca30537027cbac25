"""Unit tests for the retrying GET helper."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from wikidot_amc.connector.limiter import ConcurrencyLimiter
from wikidot_amc.util.http import fetch_with_retry, is_retryable_status


URL = "https://www.wikidot.com/user:info/alice"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestFetchWithRetry:
    @pytest.mark.parametrize(("status", "expected"), [(500, True), (503, True), (404, False), (200, False)])
    def test_is_retryable_status(self, status, expected):
        assert is_retryable_status(status) is expected

    @pytest.mark.asyncio
    async def test_server_error_then_success(self, amc_config):
        responses = iter([httpx.Response(503), httpx.Response(200, text="ok")])

        async with _client(lambda request: next(responses)) as http_client:
            with patch("wikidot_amc.util.http.asyncio.sleep", new_callable=AsyncMock) as sleep:
                response = await fetch_with_retry(http_client, URL, amc_config)

        assert response.text == "ok"
        assert sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, amc_config):
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            return httpx.Response(404)

        async with _client(handler) as http_client:
            with pytest.raises(httpx.HTTPStatusError):
                await fetch_with_retry(http_client, URL, amc_config)

        assert calls == 1

    @pytest.mark.asyncio
    async def test_check_ok_false_returns_any_response(self, amc_config):
        async with _client(lambda request: httpx.Response(500)) as http_client:
            response = await fetch_with_retry(http_client, URL, amc_config, check_ok=False)

        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_errors_exhaust_retries(self, amc_config):
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as http_client:
            with patch("wikidot_amc.util.http.asyncio.sleep", new_callable=AsyncMock):
                with pytest.raises(httpx.ConnectError):
                    await fetch_with_retry(http_client, URL, amc_config)

        assert calls == amc_config.retry_limit

    @pytest.mark.asyncio
    async def test_exchange_holds_limiter_slot_but_backoff_does_not(self, amc_config):
        limiter = ConcurrencyLimiter(1, name="test")
        responses = iter([httpx.Response(503), httpx.Response(200, text="ok")])
        seen_in_flight = []

        def handler(request):
            seen_in_flight.append(limiter.in_flight)
            return next(responses)

        async def fake_sleep(delay):
            seen_in_flight.append(limiter.in_flight)

        async with _client(handler) as http_client:
            with patch("wikidot_amc.util.http.asyncio.sleep", side_effect=fake_sleep):
                response = await fetch_with_retry(http_client, URL, amc_config, limiter=limiter)

        assert response.text == "ok"
        assert seen_in_flight == [1, 0, 1]
        assert limiter.in_flight == 0
