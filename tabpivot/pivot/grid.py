# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Grid assembly for pivot output.

Turns a PivotTable into a complete row x column grid. Each axis is the
cartesian product of the distinct values seen in its fields, so pairs
that never occurred in the input still get a (empty) cell.
"""

import math
from dataclasses import dataclass
from itertools import product
from typing import Callable, Iterable, Optional

from tabpivot.log import get_logger
from tabpivot.pivot.accumulator import CellValue, numeric_prefix
from tabpivot.pivot.grouper import KeyTuple, PivotTable
from tabpivot.pivot.layout import PivotLayout

logger = get_logger(__name__)

KEY_SEPARATOR = "\t"

DEFAULT_SORT = "lexical"


def lexical_sort_key(key: KeyTuple) -> str:
    """Order keys by the string order of their tab-joined components."""
    return KEY_SEPARATOR.join(key)


def numeric_sort_key(key: KeyTuple) -> tuple:
    """
    Order keys by the numeric value of each component.

    Components without a numeric prefix, or whose prefix is NaN, sort
    after numbers; ties fall back to string order.
    """
    parts = []
    for value in key:
        number = numeric_prefix(value)
        if number is not None and math.isnan(number):
            number = None
        parts.append((number is None, number if number is not None else 0.0, value))
    return tuple(parts)


SORT_KEYS: dict[str, Callable[[KeyTuple], object]] = {
    "lexical": lexical_sort_key,
    "numeric": numeric_sort_key,
}


def axis_keys(
    distinct_values: Iterable[set[str]],
    sort_key: Callable[[KeyTuple], object] = lexical_sort_key,
) -> list[KeyTuple]:
    """
    Enumerate every key tuple of an axis.

    Args:
        distinct_values: Distinct values of each field of the axis, in
            field order
        sort_key: Ordering applied to complete key tuples

    Returns:
        Cartesian product of the per-field values, sorted
    """
    ordered = [sorted(values, key=lambda v: sort_key((v,))) for values in distinct_values]
    return sorted(product(*ordered), key=sort_key)


@dataclass
class GridRow:
    """
    One output row: one aggregate slot of one row key.

    Attributes:
        row_key: Row key tuple
        label: Function label, e.g. "sum(4)"
        values: Derived value per column key, None where absent
        first: Whether this is the first slot of its row key
    """

    row_key: KeyTuple
    label: str
    values: list[Optional[CellValue]]
    first: bool = True


@dataclass
class PivotGrid:
    """Assembled pivot: sorted axes and one GridRow per (row key, slot)."""

    layout: PivotLayout
    row_keys: list[KeyTuple]
    col_keys: list[KeyTuple]
    rows: list[GridRow]

    @property
    def multi_function(self) -> bool:
        return self.layout.multi_function

    @property
    def leading_columns(self) -> int:
        """Columns before the first cell: row key fields plus the label column."""
        return len(self.layout.row_fields) + (1 if self.multi_function else 0)

    @property
    def header_lines(self) -> list[list[str]]:
        """One header line per column field, holding that field's component."""
        return [
            [col_key[i] for col_key in self.col_keys]
            for i in range(len(self.layout.col_fields))
        ]

    @property
    def cell_count(self) -> int:
        return len(self.rows) * len(self.col_keys)


def assemble_grid(table: PivotTable, sort: str = DEFAULT_SORT) -> PivotGrid:
    """
    Build the full grid from an aggregation table.

    Args:
        table: Populated aggregation table
        sort: Key ordering, "lexical" (default) or "numeric"

    Returns:
        The assembled PivotGrid

    Raises:
        ValueError: If sort is not a known ordering
    """
    if sort not in SORT_KEYS:
        raise ValueError(
            f"Unknown sort order: {sort}. Valid orders: {', '.join(SORT_KEYS)}"
        )
    sort_key = SORT_KEYS[sort]
    layout = table.layout

    row_keys = axis_keys(table.row_values, sort_key)
    col_keys = axis_keys(table.col_values, sort_key)

    rows: list[GridRow] = []
    for row_key in row_keys:
        for slot, aggregate in enumerate(layout.aggregates):
            values: list[Optional[CellValue]] = []
            for col_key in col_keys:
                accumulators = table.get(row_key, col_key)
                if accumulators is None:
                    values.append(None)
                else:
                    values.append(accumulators[slot].derive())
            rows.append(GridRow(row_key, aggregate.label, values, first=slot == 0))

    logger.info(
        "Assembled grid of %d row keys x %d column keys (%d functions)",
        len(row_keys),
        len(col_keys),
        len(layout.aggregates),
    )
    return PivotGrid(layout, row_keys, col_keys, rows)
