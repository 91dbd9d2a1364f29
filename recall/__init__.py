from recall.config import DEFAULT_CONFIG, FSRSConfig, load_config, normalize_config
from recall.core import (
    MemoryState,
    Rating,
    RatingPreview,
    ReviewOptions,
    ReviewResult,
    coerce_rating,
)
from recall.dates import days_until_due, is_due, review_status
from recall.review_log import (
    ReviewRecord,
    create_review_record,
    difficulty_label,
    suggest_rating_from_performance,
)
from recall.scheduler import (
    FSRSScheduler,
    calculate_interval_days,
    calculate_retrievability,
    preview_all,
    review,
)
from recall.topic import apply_review, preview_topic, topic_retrievability
from recall.weights import (
    DEFAULT_FSRS5_WEIGHTS,
    DEFAULT_FSRS6_WEIGHTS,
    VERSION_LABEL,
    Version,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_FSRS5_WEIGHTS",
    "DEFAULT_FSRS6_WEIGHTS",
    "FSRSConfig",
    "FSRSScheduler",
    "MemoryState",
    "Rating",
    "RatingPreview",
    "ReviewOptions",
    "ReviewRecord",
    "ReviewResult",
    "VERSION_LABEL",
    "Version",
    "apply_review",
    "calculate_interval_days",
    "calculate_retrievability",
    "coerce_rating",
    "create_review_record",
    "days_until_due",
    "difficulty_label",
    "is_due",
    "load_config",
    "normalize_config",
    "preview_all",
    "preview_topic",
    "review",
    "review_status",
    "suggest_rating_from_performance",
    "topic_retrievability",
]
