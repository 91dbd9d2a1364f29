import unittest
from datetime import date, datetime

from recall.dates import (
    add_days,
    days_until_due,
    elapsed_days,
    format_date,
    is_due,
    parse_date,
    review_status,
)


class TestParseDate(unittest.TestCase):
    def test_accepts_dates_datetimes_and_strings(self):
        expected = date(2024, 3, 5)

        self.assertEqual(parse_date(expected), expected)
        self.assertEqual(parse_date(datetime(2024, 3, 5, 23, 59)), expected)
        self.assertEqual(parse_date("2024-03-05"), expected)
        self.assertEqual(parse_date(" 2024-03-05T23:59:00Z "), expected)

    def test_empty_values_are_none(self):
        self.assertIsNone(parse_date(None))
        self.assertIsNone(parse_date(""))
        self.assertIsNone(parse_date("   "))

    def test_malformed_string_raises(self):
        with self.assertRaises(ValueError):
            parse_date("05/03/2024")

    def test_format_round_trip(self):
        self.assertEqual(format_date(date(2024, 1, 9)), "2024-01-09")
        self.assertIsNone(format_date(None))
        self.assertEqual(add_days(date(2024, 2, 28), 2), date(2024, 3, 1))


class TestDueDates(unittest.TestCase):
    def test_elapsed_days(self):
        self.assertEqual(elapsed_days("2024-01-01", "2024-01-11"), 10)
        self.assertEqual(elapsed_days(None, "2024-01-11"), 0)
        # A review dated in the future counts as same day.
        self.assertEqual(elapsed_days("2024-02-01", "2024-01-11"), 0)

    def test_elapsed_days_requires_reference_date(self):
        with self.assertRaises(ValueError):
            elapsed_days("2024-01-01", "")

    def test_days_until_due(self):
        self.assertEqual(days_until_due("2024-01-15", "2024-01-11"), 4)
        self.assertEqual(days_until_due("2024-01-09", "2024-01-11"), -2)
        self.assertIsNone(days_until_due(None, "2024-01-11"))

    def test_is_due(self):
        today = date(2024, 1, 11)

        self.assertTrue(is_due("2024-01-11", today))
        self.assertTrue(is_due("2023-12-31", today))
        self.assertFalse(is_due("2024-01-12", today))
        self.assertFalse(is_due(None, today))

    def test_review_status_buckets(self):
        today = "2024-01-11"
        cases = {
            None: ("none", None),
            "2024-01-05": ("overdue", -6),
            "2024-01-11": ("today", 0),
            "2024-01-12": ("tomorrow", 1),
            "2024-01-14": ("soon", 3),
            "2024-01-15": ("normal", 4),
        }
        for next_review, (urgency, days) in cases.items():
            with self.subTest(next_review=next_review):
                status = review_status(next_review, today)
                self.assertEqual(status.urgency, urgency)
                self.assertEqual(status.days, days)


if __name__ == "__main__":
    unittest.main()
