import re
import unittest
from datetime import date

from recall.config import normalize_config
from recall.core import MemoryState, Rating, ReviewResult
from recall.review_log import (
    create_review_record,
    difficulty_label,
    new_review_id,
    suggest_rating_from_performance,
)


class TestSuggestRating(unittest.TestCase):
    def test_accuracy_thresholds(self):
        cases = [
            ((10, 10), Rating.EASY),
            ((10, 9), Rating.EASY),
            ((10, 8), Rating.GOOD),
            ((10, 7), Rating.GOOD),
            ((10, 5), Rating.HARD),
            ((10, 4), Rating.AGAIN),
            ((3, 0), Rating.AGAIN),
        ]
        for (total, correct), expected in cases:
            with self.subTest(total=total, correct=correct):
                self.assertEqual(
                    suggest_rating_from_performance(total, correct), expected
                )

    def test_no_questions_means_no_suggestion(self):
        self.assertIsNone(suggest_rating_from_performance(0, 0))


class TestLabels(unittest.TestCase):
    def test_difficulty_buckets(self):
        self.assertEqual(difficulty_label(1.0), "very_easy")
        self.assertEqual(difficulty_label(2.0), "very_easy")
        self.assertEqual(difficulty_label(3.5), "easy")
        self.assertEqual(difficulty_label(6.0), "medium")
        self.assertEqual(difficulty_label(7.9), "hard")
        self.assertEqual(difficulty_label(8.01), "very_hard")

    def test_rating_labels(self):
        self.assertEqual([r.label for r in Rating], ["Again", "Hard", "Good", "Easy"])

    def test_review_ids_are_unique(self):
        ids = {new_review_id() for _ in range(50)}

        self.assertEqual(len(ids), 50)
        for review_id in ids:
            self.assertRegex(review_id, re.compile(r"^rev_[0-9a-f]{12}$"))


class TestCreateReviewRecord(unittest.TestCase):
    def setUp(self):
        self.previous = MemoryState(difficulty=5.0, stability=10.0)
        self.result = ReviewResult(
            state=MemoryState(
                difficulty=4.8,
                stability=25.3,
                last_review=date(2024, 5, 1),
                next_review=date(2024, 5, 26),
            ),
            rating=Rating.GOOD,
            elapsed_days=9,
            interval_days=25,
            scheduled_days=25,
            retrievability=0.91,
        )
        self.config = normalize_config({"version": "fsrs6"})

    def test_record_captures_before_and_after(self):
        # Act
        record = create_review_record(
            previous=self.previous,
            result=self.result,
            config=self.config,
            history_length=4,
            questions_total=8,
            questions_correct=6,
            review_id="rev_fixed",
        )

        # Assert
        self.assertEqual(record.id, "rev_fixed")
        self.assertEqual(record.review_number, 5)
        self.assertEqual(record.reviewed_on, date(2024, 5, 1))
        self.assertEqual(record.difficulty_before, 5.0)
        self.assertEqual(record.stability_after, 25.3)
        self.assertEqual(record.performance_score, 0.75)
        self.assertEqual(record.questions_total, 8)
        self.assertEqual(record.questions_correct, 6)
        self.assertEqual(record.algorithm_version, "fsrs6")
        self.assertFalse(record.used_custom_weights)
        self.assertEqual(record.rating_label, "Good")

    def test_to_dict_uses_iso_date(self):
        record = create_review_record(
            previous=self.previous, result=self.result, config=self.config
        )

        data = record.to_dict()

        self.assertEqual(data["date"], "2024-05-01")
        self.assertEqual(data["reviewNumber"], 1)
        self.assertEqual(data["rating"], 3)
        self.assertIsNone(data["performanceScore"])
        self.assertEqual(data["questionsTotal"], 0)
        self.assertEqual(data["questionsCorrect"], 0)
        self.assertTrue(data["id"].startswith("rev_"))

    def test_result_without_date_raises(self):
        undated = ReviewResult(
            state=MemoryState(difficulty=5.0, stability=3.0),
            rating=Rating.GOOD,
            elapsed_days=0,
            interval_days=3,
            scheduled_days=3,
            retrievability=None,
        )

        with self.assertRaises(ValueError):
            create_review_record(
                previous=self.previous, result=undated, config=self.config
            )


if __name__ == "__main__":
    unittest.main()
