"""Counting-semaphore limiter for in-flight HTTP exchanges."""

from __future__ import annotations

import asyncio

from ..observability.metrics import AMC_IN_FLIGHT


class ConcurrencyLimiter:
    """Bound the number of concurrently executing exchanges.

    Admission suspends the caller until a slot frees; work is delayed, never dropped.
    Used as ``async with limiter: ...`` around the network-bound part of a request.
    """

    def __init__(self, limit: int, name: str = "amc"):
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        self.limit = limit
        self.name = name
        self._semaphore = asyncio.Semaphore(limit)
        self._in_flight = 0
        self._peak = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def peak(self) -> int:
        """Highest number of simultaneously admitted units observed."""
        return self._peak

    async def __aenter__(self) -> ConcurrencyLimiter:
        await self._semaphore.acquire()
        self._in_flight += 1
        self._peak = max(self._peak, self._in_flight)
        AMC_IN_FLIGHT.labels(limiter=self.name).inc(1)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self._in_flight -= 1
        AMC_IN_FLIGHT.labels(limiter=self.name).inc(-1)
        self._semaphore.release()
