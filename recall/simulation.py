from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional

from tqdm import tqdm

from recall.core import MemoryState, Rating, ReviewOptions
from recall.dates import add_days, elapsed_days, is_due
from recall.review_log import ReviewRecord, create_review_record
from recall.scheduler import FSRSScheduler


@dataclass
class RatingDistribution:
    """Relative weights of Hard/Good/Easy when the learner recalls a topic."""

    success_weights: List[float] = field(default_factory=lambda: [0.2, 0.6, 0.2])

    def __post_init__(self) -> None:
        total = sum(self.success_weights)
        if len(self.success_weights) != 3:
            raise ValueError("success_weights must have 3 entries (hard, good, easy)")
        if not total:
            raise ValueError("success_weights must sum to > 0")
        self.success_weights = [w / total for w in self.success_weights]

    def sample(self, rng: Callable[[], float]) -> Rating:
        p = rng()
        hard, good, _ = self.success_weights
        if p < hard:
            return Rating.HARD
        if p < hard + good:
            return Rating.GOOD
        return Rating.EASY


@dataclass(slots=True)
class SimulatedTopic:
    id: int
    state: MemoryState = field(default_factory=MemoryState)
    history: List[ReviewRecord] = field(default_factory=list)
    lapses: int = 0


@dataclass(slots=True)
class SimulationStats:
    daily_reviews: List[int]
    daily_new: List[int]
    daily_retention: List[float]
    daily_memorized: List[float]
    total_reviews: int
    total_lapses: int
    records: List[ReviewRecord]

    @property
    def mean_retention(self) -> float:
        active = [
            r for r, n in zip(self.daily_retention, self.daily_reviews) if n > 0
        ]
        return sum(active) / len(active) if active else 0.0


class SimulationEngine:
    """
    Day-by-day simulation of one learner studying `topic_count` topics.

    Recall outcomes are drawn from the scheduler's own retrievability, so the
    run measures workload and retention under the configured policy.
    """

    def __init__(
        self,
        *,
        days: int,
        topic_count: int,
        scheduler: FSRSScheduler,
        start: date,
        learn_limit: int = 10,
        review_limit: Optional[int] = None,
        fuzz: bool = False,
        seed: int = 42,
        success_distribution: Optional[RatingDistribution] = None,
        progress: bool = False,
    ) -> None:
        if days < 0:
            raise ValueError("days must be >= 0")
        if topic_count < 0:
            raise ValueError("topic_count must be >= 0")
        self.days = days
        self.scheduler = scheduler
        self.start = start
        self.learn_limit = learn_limit
        self.review_limit = review_limit
        self.fuzz = fuzz
        self.rng = random.Random(seed)
        self.success_dist = success_distribution or RatingDistribution()
        self.progress = progress

        self.topics = [SimulatedTopic(id=i) for i in range(topic_count)]
        self._new_ptr = 0
        self.daily_reviews = [0 for _ in range(days)]
        self.daily_new = [0 for _ in range(days)]
        self.daily_lapses = [0 for _ in range(days)]
        self.daily_memorized = [0.0 for _ in range(days)]
        self.records: List[ReviewRecord] = []

    def run(self) -> SimulationStats:
        days = range(self.days)
        if self.progress:
            days = tqdm(days, desc="Simulating", unit="day", leave=False)
        for day in days:
            today = add_days(self.start, day)
            self._review_due(day, today)
            self._learn_new(day, today)
            self.daily_memorized[day] = self._memorized(today)
        return SimulationStats(
            daily_reviews=self.daily_reviews,
            daily_new=self.daily_new,
            daily_retention=[
                0.0 if n == 0 else 1.0 - lapses / n
                for n, lapses in zip(self.daily_reviews, self.daily_lapses)
            ],
            daily_memorized=self.daily_memorized,
            total_reviews=sum(self.daily_reviews),
            total_lapses=sum(self.daily_lapses),
            records=self.records,
        )

    def _review_due(self, day: int, today: date) -> None:
        due = [
            topic
            for topic in self.topics
            if not topic.state.is_new and is_due(topic.state.next_review, today)
        ]
        # Lowest recall probability first.
        due.sort(key=lambda topic: (self._retrievability(topic, today), topic.id))
        if self.review_limit is not None:
            due = due[: self.review_limit]
        for topic in due:
            r = self._retrievability(topic, today)
            if self.rng.random() > r:
                rating = Rating.AGAIN
            else:
                rating = self.success_dist.sample(self.rng.random)
            self._apply(topic, rating, today)
            self.daily_reviews[day] += 1
            if rating == Rating.AGAIN:
                topic.lapses += 1
                self.daily_lapses[day] += 1

    def _learn_new(self, day: int, today: date) -> None:
        learned = 0
        while learned < self.learn_limit and self._new_ptr < len(self.topics):
            topic = self.topics[self._new_ptr]
            self._new_ptr += 1
            self._apply(topic, self.success_dist.sample(self.rng.random), today)
            self.daily_new[day] += 1
            learned += 1

    def _apply(self, topic: SimulatedTopic, rating: Rating, today: date) -> None:
        options = ReviewOptions(today=today, fuzz=self.fuzz, rng=self.rng.random)
        result = self.scheduler.review(topic.state, rating, options)
        record = create_review_record(
            previous=topic.state,
            result=result,
            config=self.scheduler.config,
            history_length=len(topic.history),
            review_id=f"sim_{topic.id}_{len(topic.history) + 1}",
        )
        topic.history.append(record)
        self.records.append(record)
        topic.state = result.state

    def _retrievability(self, topic: SimulatedTopic, today: date) -> float:
        elapsed = elapsed_days(topic.state.last_review, today)
        return self.scheduler.retrievability(topic.state.stability, elapsed)

    def _memorized(self, today: date) -> float:
        return sum(
            self._retrievability(topic, today)
            for topic in self.topics
            if not topic.state.is_new
        )


def simulate(
    *,
    days: int,
    topic_count: int,
    scheduler: FSRSScheduler,
    start: date,
    learn_limit: int = 10,
    review_limit: Optional[int] = None,
    fuzz: bool = False,
    seed: int = 42,
    progress: bool = False,
) -> SimulationStats:
    """Run a seeded simulation; identical arguments give identical stats."""
    engine = SimulationEngine(
        days=days,
        topic_count=topic_count,
        scheduler=scheduler,
        start=start,
        learn_limit=learn_limit,
        review_limit=review_limit,
        fuzz=fuzz,
        seed=seed,
        progress=progress,
    )
    return engine.run()
