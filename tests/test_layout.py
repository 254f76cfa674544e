# Copyright (c) Meta Platforms, Inc. and affiliates.

"""Tests for row, column and data definition parsing."""

import unittest

from tabpivot.pivot.layout import (
    AggregateSpec,
    LayoutError,
    parse_aggregate,
    parse_aggregates,
    parse_field_list,
    PivotLayout,
)


class TestParseFieldList(unittest.TestCase):
    """Tests for parse_field_list function."""

    def test_single_field(self):
        self.assertEqual(parse_field_list("1"), (0,))

    def test_multiple_fields(self):
        self.assertEqual(parse_field_list("1,3"), (0, 2))

    def test_whitespace(self):
        self.assertEqual(parse_field_list(" 2 , 4 "), (1, 3))

    def test_integer_list(self):
        self.assertEqual(parse_field_list([1, 3]), (0, 2))

    def test_invalid(self):
        for value in ["", "0", "a", "1,,2", "-1", "1.5", [0], [True]]:
            with self.subTest(value=value):
                with self.assertRaises(LayoutError):
                    parse_field_list(value)

    def test_error_names_axis(self):
        with self.assertRaises(LayoutError) as ctx:
            parse_field_list("x", "column")
        self.assertIn("column", str(ctx.exception))


class TestParseAggregates(unittest.TestCase):
    """Tests for parse_aggregate and parse_aggregates functions."""

    def test_single(self):
        self.assertEqual(parse_aggregate("sum(4)"), AggregateSpec("sum", 3))

    def test_case_insensitive(self):
        self.assertEqual(parse_aggregate("StdDev(2)"), AggregateSpec("stddev", 1))

    def test_whitespace(self):
        self.assertEqual(parse_aggregate(" mean ( 3 ) "), AggregateSpec("mean", 2))

    def test_multiple_in_order(self):
        self.assertEqual(
            parse_aggregates("sum(4),COUNT(4),uniques(2)"),
            (
                AggregateSpec("sum", 3),
                AggregateSpec("count", 3),
                AggregateSpec("uniques", 1),
            ),
        )

    def test_list_input(self):
        self.assertEqual(
            parse_aggregates(["sum(4)", "max(1)"]),
            (AggregateSpec("sum", 3), AggregateSpec("max", 0)),
        )

    def test_unknown_function_lists_supported(self):
        with self.assertRaises(LayoutError) as ctx:
            parse_aggregate("median(4)")
        message = str(ctx.exception)
        self.assertIn("median", message)
        self.assertIn("Supported functions", message)
        self.assertIn("allvalues", message)

    def test_malformed(self):
        for token in ["sum", "sum()", "sum(a)", "sum(0)", "(4)", "sum(4"]:
            with self.subTest(token=token):
                with self.assertRaises(LayoutError):
                    parse_aggregate(token)

    def test_empty(self):
        with self.assertRaises(LayoutError):
            parse_aggregates("")

    def test_label(self):
        self.assertEqual(AggregateSpec("sum", 3).label, "sum(4)")


class TestPivotLayout(unittest.TestCase):
    """Tests for PivotLayout."""

    def test_parse(self):
        layout = PivotLayout.parse("1,3", "2", "sum(4),count(4)")
        self.assertEqual(layout.row_fields, (0, 2))
        self.assertEqual(layout.col_fields, (1,))
        self.assertEqual(layout.labels, ["sum(4)", "count(4)"])
        self.assertTrue(layout.multi_function)

    def test_single_function(self):
        self.assertFalse(PivotLayout.parse("1", "2", "sum(4)").multi_function)

    def test_max_field_index(self):
        self.assertEqual(PivotLayout.parse("1", "6", "sum(4)").max_field_index, 5)

    def test_empty_axes_rejected(self):
        with self.assertRaises(LayoutError):
            PivotLayout((), (1,), (AggregateSpec("sum", 0),))
        with self.assertRaises(LayoutError):
            PivotLayout((0,), (), (AggregateSpec("sum", 0),))
        with self.assertRaises(LayoutError):
            PivotLayout((0,), (1,), ())


if __name__ == "__main__":
    unittest.main()
