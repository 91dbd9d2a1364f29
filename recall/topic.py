from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Optional

from recall.config import FSRSConfig
from recall.core import MemoryState, RatingPreview, ReviewOptions
from recall.dates import DateLike, elapsed_days, format_date, is_due, parse_date
from recall.review_log import ReviewRecord, create_review_record
from recall.scheduler import FSRSScheduler

# Keys of the stored topic record owned by the persistence layer.
DIFFICULTY_KEY = "fsrsDifficulty"
STABILITY_KEY = "fsrsStability"
LAST_REVIEW_KEY = "fsrsLastReview"
NEXT_REVIEW_KEY = "fsrsNextReview"
HISTORY_KEY = "reviewHistory"


def _non_negative(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(numeric):
        return 0.0
    return max(0.0, numeric)


def _count(value: Any) -> int:
    return int(_non_negative(value))


def topic_state(topic: Mapping[str, Any]) -> MemoryState:
    """Read the memory state of a stored topic record."""
    return MemoryState(
        difficulty=_non_negative(topic.get(DIFFICULTY_KEY)),
        stability=_non_negative(topic.get(STABILITY_KEY)),
        last_review=parse_date(topic.get(LAST_REVIEW_KEY) or None),
        next_review=parse_date(topic.get(NEXT_REVIEW_KEY) or None),
    )


def state_fields(state: MemoryState) -> dict[str, Any]:
    return {
        DIFFICULTY_KEY: state.difficulty,
        STABILITY_KEY: state.stability,
        LAST_REVIEW_KEY: format_date(state.last_review),
        NEXT_REVIEW_KEY: format_date(state.next_review),
    }


def apply_review(
    topic: Mapping[str, Any],
    rating: int,
    config: FSRSConfig | Mapping[str, Any] | None = None,
    options: Optional[ReviewOptions] = None,
) -> tuple[dict[str, Any], ReviewRecord]:
    """
    Apply one rating to a topic record.

    Returns a copy of the record with updated scheduling fields plus the
    history entry for the review. The input is not modified and the entry is
    not appended; persisting both is up to the caller.
    """
    scheduler = FSRSScheduler(config)
    previous = topic_state(topic)
    result = scheduler.review(previous, rating, options)
    record = create_review_record(
        previous=previous,
        result=result,
        config=scheduler.config,
        history_length=len(topic.get(HISTORY_KEY) or ()),
        questions_total=_count(topic.get("questionsTotal")),
        questions_correct=_count(topic.get("questionsCorrect")),
    )
    updated = dict(topic)
    updated.update(state_fields(result.state))
    return updated, record


def preview_topic(
    topic: Mapping[str, Any],
    today: DateLike,
    config: FSRSConfig | Mapping[str, Any] | None = None,
) -> list[RatingPreview]:
    state = topic_state(topic)
    return FSRSScheduler(config).preview_all(
        state, elapsed_days(state.last_review, today)
    )


def topic_retrievability(
    topic: Mapping[str, Any],
    today: DateLike,
    config: FSRSConfig | Mapping[str, Any] | None = None,
) -> Optional[float]:
    """Current recall probability, or None for a topic never reviewed."""
    state = topic_state(topic)
    if state.is_new:
        return None
    elapsed = elapsed_days(state.last_review, today)
    return FSRSScheduler(config).retrievability(state.stability, elapsed)


def due_topics(
    topics: Iterable[Mapping[str, Any]], today: DateLike
) -> list[Mapping[str, Any]]:
    return [topic for topic in topics if is_due(topic.get(NEXT_REVIEW_KEY), today)]
