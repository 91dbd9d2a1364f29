from __future__ import annotations

import argparse
import random
import statistics
import sys
import time
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Callable, Iterable

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from recall.core import MemoryState, ReviewOptions
from recall.scheduler import FSRSScheduler
from recall.simulation import simulate

START = date(2024, 1, 1)


@dataclass(frozen=True)
class Scenario:
    name: str
    config: dict[str, Any] = field(default_factory=dict)
    days: int = 365
    topics: int = 1000
    fuzz: bool = False


SCENARIOS: list[Scenario] = [
    Scenario(name="fsrs5_default", config={"version": "fsrs5"}),
    Scenario(name="fsrs6_default", config={"version": "fsrs6"}),
    Scenario(name="fsrs6_fuzz", config={"version": "fsrs6"}, fuzz=True),
    Scenario(
        name="fsrs5_capped",
        config={"version": "fsrs5", "maxIntervalDays": 30, "lapseMinIntervalDays": 2},
    ),
]


def _select(names: Iterable[str] | None, version: str | None) -> list[Scenario]:
    scenarios = list(SCENARIOS)
    if names:
        requested = {name.strip() for name in names if name.strip()}
        scenarios = [s for s in scenarios if s.name in requested]
        if not scenarios:
            available = ", ".join(s.name for s in SCENARIOS)
            raise SystemExit(f"No matching scenarios. Available: {available}")
    if version is None:
        return scenarios
    return [
        Scenario(
            name=s.name,
            config={**s.config, "version": version},
            days=s.days,
            topics=s.topics,
            fuzz=s.fuzz,
        )
        for s in scenarios
    ]


def _timed(fn: Callable[[], Any], repeat: int) -> list[float]:
    times = []
    for _ in range(max(1, repeat)):
        start = time.perf_counter()
        fn()
        times.append(time.perf_counter() - start)
    return times


def _review_throughput(scheduler: FSRSScheduler, count: int, seed: int) -> None:
    rng = random.Random(seed)
    state = MemoryState()
    today = START
    for _ in range(count):
        rating = rng.randint(1, 4)
        options = ReviewOptions(today=today, fuzz=True, rng=rng.random)
        state = scheduler.review(state, rating, options).state
        today = state.next_review or today + timedelta(days=1)
        if state.stability > 10000:
            state = MemoryState()


def main() -> None:
    parser = argparse.ArgumentParser(description="Time the scheduler and simulation.")
    parser.add_argument(
        "--scenario",
        action="append",
        default=None,
        help="Scenario name to run (repeatable).",
    )
    parser.add_argument(
        "--version",
        choices=["fsrs5", "fsrs6"],
        default=None,
        help="Override scenario algorithm version.",
    )
    parser.add_argument(
        "--repeat", type=int, default=1, help="Repeat each scenario N times."
    )
    parser.add_argument(
        "--reviews",
        type=int,
        default=100_000,
        help="Single-topic reviews timed per scenario.",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed.")
    args = parser.parse_args()

    for scenario in _select(args.scenario, args.version):
        scheduler = FSRSScheduler(scenario.config)
        sim_times = _timed(
            lambda: simulate(
                days=scenario.days,
                topic_count=scenario.topics,
                scheduler=scheduler,
                start=START,
                fuzz=scenario.fuzz,
                seed=args.seed,
            ),
            args.repeat,
        )
        review_times = _timed(
            lambda: _review_throughput(scheduler, args.reviews, args.seed),
            args.repeat,
        )
        per_review_us = min(review_times) / max(1, args.reviews) * 1e6
        print(
            f"{scenario.name}: sim best {min(sim_times):.2f}s "
            f"avg {statistics.mean(sim_times):.2f}s | "
            f"review {per_review_us:.1f}us"
        )


if __name__ == "__main__":
    main()
