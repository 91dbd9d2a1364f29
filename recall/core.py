from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import date
from enum import IntEnum
from typing import Any, Callable, Optional


class Rating(IntEnum):
    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @property
    def label(self) -> str:
        return RATING_LABELS[self]


RATING_LABELS: dict[Rating, str] = {
    Rating.AGAIN: "Again",
    Rating.HARD: "Hard",
    Rating.GOOD: "Good",
    Rating.EASY: "Easy",
}


def coerce_rating(value: Any) -> Rating:
    """Return `value` as a `Rating`; anything outside 1..4 is a caller bug."""
    if isinstance(value, bool):
        raise ValueError(f"Unknown rating {value!r}")
    try:
        return Rating(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Unknown rating {value!r}") from exc


@dataclass(frozen=True, slots=True)
class MemoryState:
    """Per-topic memory model. `stability <= 0` marks a topic never reviewed."""

    difficulty: float = 0.0
    stability: float = 0.0
    last_review: Optional[date] = None
    next_review: Optional[date] = None

    @property
    def is_new(self) -> bool:
        return self.stability <= 0.0


@dataclass(slots=True)
class ReviewOptions:
    """
    Per-call options for applying a rating.

    `elapsed_days` overrides the value derived from `last_review` and `today`.
    `today` is required by `review`; the engine never reads the clock. With
    `fuzz` enabled, `rng` supplies uniform draws in [0, 1).
    """

    elapsed_days: Optional[int] = None
    today: Optional[date] = None
    fuzz: bool = False
    rng: Callable[[], float] = field(default=random.random)


@dataclass(frozen=True, slots=True)
class ReviewResult:
    state: MemoryState
    rating: Rating
    elapsed_days: int
    interval_days: int
    scheduled_days: int
    retrievability: Optional[float]


@dataclass(frozen=True, slots=True)
class RatingPreview:
    rating: Rating
    difficulty: float
    stability: float
    interval_days: int
    scheduled_days: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "rating": int(self.rating),
            "difficulty": self.difficulty,
            "stability": self.stability,
            "intervalDays": self.interval_days,
            "scheduledDays": self.scheduled_days,
        }
