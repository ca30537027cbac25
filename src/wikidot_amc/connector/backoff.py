"""Exponential backoff with jitter shared by every retrying code path."""

from __future__ import annotations

import random


JITTER_RATIO = 0.1


def calculate_backoff(
    retry_count: int,
    base_interval: float,
    backoff_factor: float,
    max_backoff: float,
    rng: random.Random | None = None,
) -> float:
    """Return the delay (seconds) to wait before the next attempt.

    The delay is ``base_interval * backoff_factor ** (retry_count - 1)`` plus up to 10%
    uniform jitter, clamped to ``max_backoff``.

    Args:
        retry_count: Number of attempts made so far (starts at 1)
        base_interval: Base interval in seconds
        backoff_factor: Multiplicative factor applied per attempt
        max_backoff: Upper bound for the returned delay
        rng: Optional random source (defaults to the module-level generator)
    """
    exponent = max(retry_count, 1) - 1
    backoff = base_interval * backoff_factor**exponent
    jitter = (rng or random).uniform(0.0, backoff * JITTER_RATIO)
    return min(backoff + jitter, max_backoff)
