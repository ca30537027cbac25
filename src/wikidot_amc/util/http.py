"""Retrying HTTP GET helper for non-AMC endpoints (profile pages, quickmodule.php)."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import httpx

from ..config import AMCConfig
from ..connector.backoff import calculate_backoff


if TYPE_CHECKING:
    from ..connector.limiter import ConcurrencyLimiter


logger = logging.getLogger(__name__)


def is_retryable_status(status_code: int) -> bool:
    """Server errors are worth another attempt; client errors are not."""
    return 500 <= status_code < 600


async def fetch_with_retry(
    http_client: httpx.AsyncClient,
    url: str,
    config: AMCConfig,
    *,
    method: str = "GET",
    check_ok: bool = True,
    limiter: ConcurrencyLimiter | None = None,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request, retrying transport errors and 5xx responses with backoff.

    Args:
        http_client: Client used for the exchange
        url: Target URL
        config: Supplies ``retry_limit`` and the backoff parameters
        method: HTTP method
        check_ok: When False, any response is returned and only transport errors are retried
        limiter: When given, each exchange holds one of its slots; backoff sleeps do not
        **kwargs: Passed through to ``httpx.AsyncClient.request``

    Raises:
        httpx.HTTPStatusError: On a 4xx response, or a 5xx on the final attempt (``check_ok`` only)
        httpx.HTTPError: When the transport keeps failing
    """
    for attempt in range(1, config.retry_limit + 1):
        try:
            if limiter is None:
                response = await http_client.request(method, url, **kwargs)
            else:
                async with limiter:
                    response = await http_client.request(method, url, **kwargs)
            if check_ok:
                response.raise_for_status()
            return response
        except httpx.HTTPStatusError as exc:
            if not is_retryable_status(exc.response.status_code) or attempt >= config.retry_limit:
                raise
            logger.debug("Retrying %s after HTTP %s (attempt %d)", url, exc.response.status_code, attempt)
        except httpx.HTTPError as exc:
            if attempt >= config.retry_limit:
                raise
            logger.debug("Retrying %s after transport error %s (attempt %d)", url, exc, attempt)

        await asyncio.sleep(
            calculate_backoff(attempt, config.retry_interval, config.backoff_factor, config.max_backoff)
        )

    raise RuntimeError("fetch_with_retry exhausted without a response")
