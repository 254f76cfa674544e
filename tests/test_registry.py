# Copyright (c) Meta Platforms, Inc. and affiliates.

"""Tests for the aggregate function registry."""

import unittest

from tabpivot.pivot.registry import (
    AGGREGATE_FUNCTIONS,
    dependencies,
    is_supported,
    normalize_function_name,
    Statistic,
    supported_functions,
)


class TestRegistry(unittest.TestCase):
    """Tests for function lookups."""

    def test_supported_functions(self):
        self.assertEqual(
            supported_functions(),
            [
                "count",
                "min",
                "max",
                "sum",
                "mean",
                "variance",
                "stddev",
                "skew",
                "uniques",
                "allvalues",
            ],
        )

    def test_mean_depends_on_count_and_sum(self):
        self.assertEqual(
            dependencies("mean"), frozenset({Statistic.COUNT, Statistic.SUM})
        )

    def test_variance_and_stddev_share_dependencies(self):
        self.assertEqual(dependencies("variance"), dependencies("stddev"))
        self.assertIn(Statistic.SUM2, dependencies("variance"))

    def test_skew_tracks_third_moment(self):
        self.assertEqual(
            dependencies("skew"),
            frozenset(
                {Statistic.COUNT, Statistic.SUM, Statistic.SUM2, Statistic.SUM3}
            ),
        )

    def test_single_statistic_functions(self):
        """Functions that depend on exactly one statistic of their own name."""
        for name in ["count", "min", "max", "sum", "uniques", "allvalues"]:
            with self.subTest(name=name):
                self.assertEqual(dependencies(name), frozenset({Statistic(name)}))

    def test_lookup_is_case_insensitive(self):
        self.assertEqual(dependencies("MEAN"), dependencies("mean"))
        self.assertTrue(is_supported("StdDev"))
        self.assertEqual(normalize_function_name(" SKEW "), "skew")

    def test_unknown_function(self):
        self.assertFalse(is_supported("median"))
        with self.assertRaises(KeyError):
            dependencies("median")

    def test_every_function_has_dependencies(self):
        for name, stats in AGGREGATE_FUNCTIONS.items():
            with self.subTest(name=name):
                self.assertTrue(stats)


if __name__ == "__main__":
    unittest.main()
