"""Unit tests for the concurrency limiter."""

import asyncio

import pytest

from wikidot_amc.connector.limiter import ConcurrencyLimiter


class TestConcurrencyLimiter:
    @pytest.mark.parametrize("limit", [0, -1])
    def test_limit_must_be_positive(self, limit):
        with pytest.raises(ValueError):
            ConcurrencyLimiter(limit)

    @pytest.mark.asyncio
    async def test_never_admits_more_than_limit(self):
        limiter = ConcurrencyLimiter(2, name="test")

        async def work():
            async with limiter:
                assert limiter.in_flight <= 2
                await asyncio.sleep(0.01)

        await asyncio.gather(*(work() for _ in range(6)))

        assert limiter.peak == 2
        assert limiter.in_flight == 0

    @pytest.mark.asyncio
    async def test_slot_released_on_error(self):
        limiter = ConcurrencyLimiter(1, name="test")

        with pytest.raises(RuntimeError):
            async with limiter:
                raise RuntimeError("boom")

        assert limiter.in_flight == 0
        async with asyncio.timeout(1):
            async with limiter:
                assert limiter.in_flight == 1
