from __future__ import annotations

import math
from typing import Callable, Optional

from recall.math.fsrs import round_half_up

# (exclusive upper interval, relative tolerance)
FUZZ_RANGES: list[tuple[float, float]] = [
    (8.0, 0.15),
    (30.0, 0.1),
    (float("inf"), 0.05),
]

MIN_FUZZ_INTERVAL = 3
MIN_FUZZED_INTERVAL = 2


def fuzz_factor(interval: float) -> float:
    for end, factor in FUZZ_RANGES:
        if interval < end:
            return factor
    return FUZZ_RANGES[-1][1]


def fuzz_bounds(interval: int) -> tuple[int, int]:
    """
    Inclusive draw range around `interval`.

    The lower bound always sits below and the upper bound above the unfuzzed
    interval, and nothing is drawn under two days.
    """
    delta = interval * fuzz_factor(interval)
    lower = min(round_half_up(interval - delta), interval - 1)
    upper = max(round_half_up(interval + delta), interval + 1)
    return max(MIN_FUZZED_INTERVAL, lower), upper


def with_review_fuzz(interval: int, rng: Optional[Callable[[], float]]) -> int:
    if rng is None or interval < MIN_FUZZ_INTERVAL:
        return interval
    lower, upper = fuzz_bounds(interval)
    fuzzed = int(math.floor(lower + rng() * (1 + upper - lower)))
    return max(lower, min(upper, fuzzed))
