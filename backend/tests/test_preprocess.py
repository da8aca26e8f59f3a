"""Tests for feature construction and the trailing moving window."""
import random
import unittest

import numpy as np

from forecasting.errors import InsufficientDataError
from forecasting.preprocess import (
    MovingWindow,
    NormalizationConstants,
    build_features,
    compute_constants,
    future_feature_vector,
)

from fixtures import monthly


class TestBuildFeatures(unittest.TestCase):

    def setUp(self):
        self.months = [
            monthly(2024, 1, 1000, 800),
            monthly(2024, 2, 1000, 900),
            monthly(2024, 3, 1200, 800),
            monthly(2024, 4, 1200, 900),
        ]

    def test_constants(self):
        fs = build_features(self.months)

        self.assertEqual(
            fs.constants,
            NormalizationConstants(max_income=1200, max_expense=900, min_year=2024, max_year=2024),
        )

    def test_feature_values(self):
        fs = build_features(self.months)

        self.assertEqual(fs.features.shape, (4, 4))
        np.testing.assert_allclose(fs.features[:, 0], [1 / 12, 2 / 12, 3 / 12, 4 / 12], rtol=1e-6)
        # single year -> divisor 1, position 0
        np.testing.assert_allclose(fs.features[:, 1], [0, 0, 0, 0])
        # first row has no history
        np.testing.assert_allclose(fs.features[0, 2:], [0, 0])
        np.testing.assert_allclose(fs.features[1, 2:], [1000 / 1200, 800 / 900], rtol=1e-6)
        np.testing.assert_allclose(fs.features[2, 2:], [1000 / 1200, 850 / 900], rtol=1e-6)
        np.testing.assert_allclose(
            fs.features[3, 2:], [(3200 / 3) / 1200, (2500 / 3) / 900], rtol=1e-6
        )

    def test_window_caps_at_three_months(self):
        months = self.months + [monthly(2024, 5, 0, 0)]

        fs = build_features(months)

        # row 4 averages rows 1..3 only
        np.testing.assert_allclose(fs.features[4, 2], (1000 + 1200 + 1200) / 3 / 1200, rtol=1e-6)

    def test_labels(self):
        fs = build_features(self.months)

        np.testing.assert_allclose(fs.income_labels, [1000 / 1200, 1000 / 1200, 1, 1], rtol=1e-6)
        np.testing.assert_allclose(fs.expense_labels, [800 / 900, 1, 800 / 900, 1], rtol=1e-6)

    def test_year_position_across_years(self):
        months = [monthly(2022, 12, 1, 1), monthly(2023, 6, 1, 1), monthly(2024, 1, 1, 1)]

        fs = build_features(months)

        np.testing.assert_allclose(fs.features[:, 1], [0, 0.5, 1])

    def test_zero_maximum_gives_zero_not_nan(self):
        months = [monthly(2024, m, 0, 100 * m) for m in range(1, 5)]

        fs = build_features(months)

        self.assertFalse(np.isnan(fs.features).any())
        np.testing.assert_array_equal(fs.income_labels, [0, 0, 0, 0])
        np.testing.assert_array_equal(fs.features[:, 2], [0, 0, 0, 0])

    def test_all_values_in_unit_interval(self):
        rng = random.Random(11)
        for _ in range(25):
            n = rng.randint(3, 30)
            months = []
            year, month = rng.randint(2015, 2024), rng.randint(1, 12)
            for _ in range(n):
                months.append(monthly(year, month, rng.uniform(0, 5000), rng.choice([0, rng.uniform(0, 5000)])))
                month += rng.randint(1, 3)
                if month > 12:
                    year, month = year + 1, month - 12

            fs = build_features(months)

            for arr in (fs.features, fs.income_labels, fs.expense_labels):
                self.assertTrue((arr >= 0).all() and (arr <= 1).all())

    def test_insufficient_data(self):
        for n in (0, 1, 2):
            with self.subTest(months=n):
                with self.assertRaises(InsufficientDataError):
                    build_features(self.months[:n])

        self.assertEqual(len(build_features(self.months[:3])), 3)


class TestFutureFeatureVector(unittest.TestCase):

    def test_uses_window_means(self):
        constants = NormalizationConstants(max_income=2000, max_expense=1000, min_year=2023, max_year=2024)
        income = MovingWindow([1000, 2000])
        expense = MovingWindow([500])

        x = future_feature_vector(constants, 2025, 3, income, expense)

        np.testing.assert_allclose(x, [3 / 12, 2.0, 0.75, 0.5], rtol=1e-6)
        self.assertEqual(x.dtype, np.float32)

    def test_empty_windows_and_zero_maxima(self):
        constants = NormalizationConstants(max_income=0, max_expense=0, min_year=2024, max_year=2024)

        x = future_feature_vector(constants, 2024, 12, MovingWindow(), MovingWindow([10]))

        np.testing.assert_allclose(x, [1.0, 0.0, 0.0, 0.0])

    def test_compute_constants_rejects_empty(self):
        with self.assertRaises(InsufficientDataError):
            compute_constants([])


class TestMovingWindow(unittest.TestCase):

    def test_push_evicts_oldest(self):
        w = MovingWindow([1, 2, 3])
        w.push(4)

        self.assertEqual(w.values(), [2.0, 3.0, 4.0])
        self.assertEqual(len(w), 3)
        self.assertEqual(w.mean(), 3.0)

    def test_seed_longer_than_capacity_keeps_tail(self):
        self.assertEqual(MovingWindow([1, 2, 3, 4, 5]).values(), [3.0, 4.0, 5.0])

    def test_empty_mean(self):
        self.assertEqual(MovingWindow().mean(), 0.0)


if __name__ == "__main__":
    unittest.main()
