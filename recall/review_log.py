from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from recall.config import FSRSConfig
from recall.core import MemoryState, Rating, ReviewResult
from recall.dates import format_date


@dataclass(frozen=True, slots=True)
class ReviewRecord:
    """History entry appended to a topic's review log by the caller."""

    id: str
    review_number: int
    reviewed_on: date
    rating: Rating
    difficulty_before: float
    difficulty_after: float
    stability_before: float
    stability_after: float
    interval_days: int
    scheduled_days: int
    retrievability: Optional[float]
    performance_score: Optional[float]
    questions_total: int
    questions_correct: int
    algorithm_version: str
    requested_retention: float
    used_custom_weights: bool

    @property
    def rating_label(self) -> str:
        return self.rating.label

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "reviewNumber": self.review_number,
            "date": format_date(self.reviewed_on),
            "rating": int(self.rating),
            "ratingLabel": self.rating_label,
            "difficultyBefore": self.difficulty_before,
            "difficultyAfter": self.difficulty_after,
            "stabilityBefore": self.stability_before,
            "stabilityAfter": self.stability_after,
            "intervalDays": self.interval_days,
            "scheduledDays": self.scheduled_days,
            "retrievability": self.retrievability,
            "performanceScore": self.performance_score,
            "questionsTotal": self.questions_total,
            "questionsCorrect": self.questions_correct,
            "algorithmVersion": self.algorithm_version,
            "requestedRetention": self.requested_retention,
            "usedCustomWeights": self.used_custom_weights,
        }


def new_review_id() -> str:
    return f"rev_{uuid.uuid4().hex[:12]}"


def performance_score(questions_total: int, questions_correct: int) -> Optional[float]:
    if questions_total <= 0:
        return None
    return questions_correct / questions_total


def suggest_rating_from_performance(
    questions_total: int, questions_correct: int
) -> Optional[Rating]:
    """Map question accuracy to the rating a learner would most likely pick."""
    accuracy = performance_score(questions_total, questions_correct)
    if accuracy is None:
        return None
    if accuracy >= 0.9:
        return Rating.EASY
    if accuracy >= 0.7:
        return Rating.GOOD
    if accuracy >= 0.5:
        return Rating.HARD
    return Rating.AGAIN


def difficulty_label(difficulty: float) -> str:
    if difficulty <= 2:
        return "very_easy"
    if difficulty <= 4:
        return "easy"
    if difficulty <= 6:
        return "medium"
    if difficulty <= 8:
        return "hard"
    return "very_hard"


def create_review_record(
    *,
    previous: MemoryState,
    result: ReviewResult,
    config: FSRSConfig,
    history_length: int = 0,
    questions_total: int = 0,
    questions_correct: int = 0,
    review_id: Optional[str] = None,
) -> ReviewRecord:
    reviewed_on = result.state.last_review
    if reviewed_on is None:
        raise ValueError("Review result carries no review date.")
    return ReviewRecord(
        id=review_id or new_review_id(),
        review_number=history_length + 1,
        reviewed_on=reviewed_on,
        rating=result.rating,
        difficulty_before=previous.difficulty,
        difficulty_after=result.state.difficulty,
        stability_before=previous.stability,
        stability_after=result.state.stability,
        interval_days=result.interval_days,
        scheduled_days=result.scheduled_days,
        retrievability=result.retrievability,
        performance_score=performance_score(questions_total, questions_correct),
        questions_total=questions_total,
        questions_correct=questions_correct,
        algorithm_version=config.version.value,
        requested_retention=config.requested_retention,
        used_custom_weights=config.uses_custom_weights,
    )
