from __future__ import annotations

import math
from typing import Any, Callable, Mapping, Optional, Tuple

from recall.config import FSRSConfig, normalize_config
from recall.core import (
    MemoryState,
    Rating,
    RatingPreview,
    ReviewOptions,
    ReviewResult,
    coerce_rating,
)
from recall.dates import DateLike, add_days, parse_date
from recall.dates import elapsed_days as days_since
from recall.fuzz import with_review_fuzz
from recall.math.fsrs import (
    Bounds,
    curve_params,
    forgetting_curve,
    init_state,
    next_d,
    next_interval,
    sanitize_state,
    stability_after_failure,
    stability_after_success,
    stability_short_term,
)

# Minimum scheduled days above the lapse interval, per rating.
_FLOOR_OFFSETS = {Rating.HARD: 1, Rating.GOOD: 2, Rating.EASY: 3}


class FSRSScheduler:
    """
    FSRS v5/v6 scheduler maintaining per-topic difficulty/stability.

    Instances are immutable views over a resolved configuration; every method
    is a pure function of its arguments.
    """

    def __init__(
        self,
        config: FSRSConfig | Mapping[str, Any] | None = None,
        bounds: Bounds = Bounds(),
    ):
        self.config = normalize_config(config)
        self.weights = self.config.weights
        self.curve = curve_params(self.config.version, self.weights)
        self.bounds = bounds

    def retrievability(self, stability: float, elapsed_days: float) -> float:
        r = forgetting_curve(self.curve, elapsed_days, stability)
        return r if math.isfinite(r) else 0.0

    def interval(self, stability: float) -> int:
        return next_interval(
            self.curve,
            stability,
            self.config.requested_retention,
            self.config.max_interval_days,
        )

    def update_state(
        self, state: MemoryState, rating: int, elapsed_days: int
    ) -> Tuple[float, float, Optional[float]]:
        """
        Return (stability, difficulty, retrievability) after `rating`.

        Retrievability is None for a first review.
        """
        rating = coerce_rating(rating)
        elapsed = max(0, int(elapsed_days))
        w = self.weights
        s = float(state.stability)
        r: Optional[float] = None

        if not math.isfinite(s) or s <= 0.0:
            s, d = init_state(w, rating, self.bounds)
        else:
            d = self._stored_difficulty(state.difficulty)
            r = self.retrievability(s, elapsed)
            d = next_d(w, d, rating, self.bounds)
            if elapsed == 0:
                # Applies to Again as well.
                s = stability_short_term(w, s, rating, version=self.config.version)
            elif rating == Rating.AGAIN:
                s = stability_after_failure(w, s, r, d)
            else:
                s = stability_after_success(w, s, r, d, rating)

        s, d = sanitize_state(w, s, d, rating, self.bounds)
        return s, d, r

    def scheduled_days(
        self,
        rating: int,
        interval: int,
        rng: Optional[Callable[[], float]] = None,
    ) -> int:
        rating = coerce_rating(rating)
        lapse_min = self.config.lapse_min_interval_days
        if rating == Rating.AGAIN:
            days = lapse_min
        else:
            floor = lapse_min + _FLOOR_OFFSETS[rating]
            days = max(floor, with_review_fuzz(interval, rng))
        return min(days, self.config.max_interval_days)

    def schedule(
        self,
        stability: float,
        difficulty: float,
        rating: int,
        today: DateLike,
        rng: Optional[Callable[[], float]] = None,
    ) -> Tuple[MemoryState, int, int]:
        """Return (new state, unfuzzed interval, scheduled days)."""
        day = parse_date(today)
        if day is None:
            raise ValueError("schedule() requires a reference date.")
        interval = self.interval(stability)
        days = self.scheduled_days(rating, interval, rng)
        state = MemoryState(
            difficulty=difficulty,
            stability=stability,
            last_review=day,
            next_review=add_days(day, days),
        )
        return state, interval, days

    def review(
        self,
        state: MemoryState,
        rating: int,
        options: Optional[ReviewOptions] = None,
    ) -> ReviewResult:
        options = options or ReviewOptions()
        rating = coerce_rating(rating)
        today = parse_date(options.today)
        if today is None:
            raise ValueError("review() requires ReviewOptions.today.")
        if options.elapsed_days is not None:
            elapsed = max(0, int(options.elapsed_days))
        else:
            elapsed = days_since(state.last_review, today)

        s, d, r = self.update_state(state, rating, elapsed)
        rng = options.rng if options.fuzz else None
        new_state, interval, days = self.schedule(s, d, rating, today, rng)
        return ReviewResult(
            state=new_state,
            rating=rating,
            elapsed_days=elapsed,
            interval_days=interval,
            scheduled_days=days,
            retrievability=r,
        )

    def preview_all(
        self, state: MemoryState, elapsed_days: int = 0
    ) -> list[RatingPreview]:
        """
        Outcome of each rating without fuzz; scheduled days strictly increase
        from Again to Easy.
        """
        previews: list[RatingPreview] = []
        previous: Optional[int] = None
        for rating in Rating:
            s, d, _ = self.update_state(state, rating, elapsed_days)
            interval = self.interval(s)
            days = self.scheduled_days(rating, interval)
            if previous is not None and days <= previous:
                days = previous + 1
            previous = days
            previews.append(
                RatingPreview(
                    rating=rating,
                    difficulty=d,
                    stability=s,
                    interval_days=interval,
                    scheduled_days=days,
                )
            )
        return previews

    def _stored_difficulty(self, value: float) -> float:
        d = float(value)
        if not math.isfinite(d):
            d = init_state(self.weights, Rating.GOOD, self.bounds)[1]
        return max(self.bounds.d_min, min(d, self.bounds.d_max))


def review(
    state: MemoryState,
    rating: int,
    config: FSRSConfig | Mapping[str, Any] | None = None,
    options: Optional[ReviewOptions] = None,
) -> ReviewResult:
    return FSRSScheduler(config).review(state, rating, options)


def preview_all(
    state: MemoryState,
    config: FSRSConfig | Mapping[str, Any] | None = None,
    elapsed_days: int = 0,
) -> list[RatingPreview]:
    return FSRSScheduler(config).preview_all(state, elapsed_days)


def calculate_retrievability(
    stability: float,
    elapsed_days: float,
    config: FSRSConfig | Mapping[str, Any] | None = None,
) -> float:
    return FSRSScheduler(config).retrievability(stability, elapsed_days)


def calculate_interval_days(
    stability: float, config: FSRSConfig | Mapping[str, Any] | None = None
) -> int:
    return FSRSScheduler(config).interval(stability)
