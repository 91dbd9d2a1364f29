import unittest

from recall.fuzz import fuzz_bounds, fuzz_factor, with_review_fuzz


class TestFuzzBounds(unittest.TestCase):
    def test_factor_by_interval_range(self):
        self.assertEqual(fuzz_factor(3), 0.15)
        self.assertEqual(fuzz_factor(7), 0.15)
        self.assertEqual(fuzz_factor(8), 0.1)
        self.assertEqual(fuzz_factor(29), 0.1)
        self.assertEqual(fuzz_factor(30), 0.05)
        self.assertEqual(fuzz_factor(5000), 0.05)

    def test_bounds_straddle_interval(self):
        self.assertEqual(fuzz_bounds(3), (2, 4))
        self.assertEqual(fuzz_bounds(10), (9, 11))
        self.assertEqual(fuzz_bounds(100), (95, 105))

    def test_bounds_never_collapse(self):
        for interval in range(3, 400):
            with self.subTest(interval=interval):
                lower, upper = fuzz_bounds(interval)
                self.assertLess(lower, interval)
                self.assertGreater(upper, interval)
                self.assertGreaterEqual(lower, 2)


class TestWithReviewFuzz(unittest.TestCase):
    def test_short_intervals_are_untouched(self):
        for interval in (0, 1, 2):
            with self.subTest(interval=interval):
                self.assertEqual(with_review_fuzz(interval, lambda: 0.0), interval)

    def test_no_random_source_means_no_fuzz(self):
        self.assertEqual(with_review_fuzz(50, None), 50)

    def test_draw_covers_inclusive_range(self):
        # Arrange
        draws = [i / 100 for i in range(100)]

        # Act
        values = {with_review_fuzz(10, lambda d=d: d) for d in draws}

        # Assert
        self.assertEqual(values, {9, 10, 11})

    def test_extreme_draws_hit_bounds(self):
        self.assertEqual(with_review_fuzz(100, lambda: 0.0), 95)
        self.assertEqual(with_review_fuzz(100, lambda: 0.9999999), 105)


if __name__ == "__main__":
    unittest.main()
