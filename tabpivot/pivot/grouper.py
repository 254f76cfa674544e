# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Streaming grouper for pivot aggregation.

Consumes tab-delimited records in a single pass and routes every record
to the accumulators of its (row key, column key) cell. The per-field
distinct values seen on each axis are recorded alongside, independent
of which cell they occurred in.
"""

import copy
from dataclasses import dataclass, field
from typing import Iterator, Optional

from tabpivot.log import get_logger
from tabpivot.pivot.accumulator import Accumulator, NonNumericValueError
from tabpivot.pivot.layout import PivotLayout
from tabpivot.pivot.reader import get_field

logger = get_logger(__name__)

KeyTuple = tuple[str, ...]
CellKey = tuple[KeyTuple, KeyTuple]


@dataclass
class PivotTable:
    """
    Aggregation state of a pivot.

    Attributes:
        layout: Row, column and data definitions
        cells: (row key, column key) -> one accumulator per aggregate slot
        row_values: Distinct values seen in each row field, in field order
        col_values: Distinct values seen in each column field, in field order
        record_count: Number of records folded in
        strict: Whether numeric aggregates reject non-numeric values
    """

    layout: PivotLayout
    cells: dict[CellKey, list[Accumulator]] = field(default_factory=dict)
    row_values: list[set[str]] = field(default_factory=list)
    col_values: list[set[str]] = field(default_factory=list)
    record_count: int = 0
    strict: bool = False

    def __post_init__(self) -> None:
        if not self.row_values:
            self.row_values = [set() for _ in self.layout.row_fields]
        if not self.col_values:
            self.col_values = [set() for _ in self.layout.col_fields]

    @property
    def cell_count(self) -> int:
        """Number of (row key, column key) pairs actually observed."""
        return len(self.cells)

    def _new_slots(self) -> list[Accumulator]:
        return [Accumulator(a.function, self.strict) for a in self.layout.aggregates]

    def add_record(self, record: list[str]) -> None:
        """
        Fold one record into the table.

        Fields missing from a short record read as "".

        Raises:
            NonNumericValueError: In strict mode, for a non-numeric value
                fed to a numeric aggregate
        """
        layout = self.layout
        self.record_count += 1

        row_key = tuple(get_field(record, i) for i in layout.row_fields)
        col_key = tuple(get_field(record, i) for i in layout.col_fields)

        slots = self.cells.get((row_key, col_key))
        if slots is None:
            slots = self._new_slots()
            self.cells[(row_key, col_key)] = slots

        for slot, spec in zip(slots, layout.aggregates):
            value = get_field(record, spec.field_index)
            try:
                slot.update(value)
            except NonNumericValueError as e:
                raise NonNumericValueError(
                    e.value, record=self.record_count, field_index=spec.field_index + 1
                ) from None

        for values, key_value in zip(self.row_values, row_key):
            values.add(key_value)
        for values, key_value in zip(self.col_values, col_key):
            values.add(key_value)

        if len(record) <= layout.max_field_index:
            logger.debug(
                "Record %d has %d fields, missing fields read as empty",
                self.record_count,
                len(record),
            )

    def get(self, row_key: KeyTuple, col_key: KeyTuple) -> Optional[list[Accumulator]]:
        """Accumulators of a cell, or None if the pair was never observed."""
        return self.cells.get((row_key, col_key))

    def merge(self, other: "PivotTable") -> None:
        """
        Fold a table built over another partition of the input into this one.

        Accumulators for pairs seen in both tables are merged slot by
        slot; pairs only seen in other are copied, so other stays independent.

        Raises:
            ValueError: If the layouts or strict modes differ
        """
        if other.layout != self.layout:
            raise ValueError("Cannot merge pivot tables with different layouts")
        if other.strict != self.strict:
            raise ValueError("Cannot merge strict and lenient pivot tables")

        for key, other_slots in other.cells.items():
            slots = self.cells.get(key)
            if slots is None:
                self.cells[key] = copy.deepcopy(other_slots)
                continue
            for slot, other_slot in zip(slots, other_slots):
                slot.merge(other_slot)

        for values, other_values in zip(self.row_values, other.row_values):
            values.update(other_values)
        for values, other_values in zip(self.col_values, other.col_values):
            values.update(other_values)
        self.record_count += other.record_count


class PivotGrouper:
    """
    Single-pass grouper from records to a PivotTable.

    All cells and distinct values are held in memory until the stream
    ends, so memory grows with the number of distinct (row, column)
    pairs, and with the number of records for allvalues.

    Example:
        >>> layout = PivotLayout.parse("1", "2", "sum(3)")
        >>> records = iter([["a", "x", "1"], ["a", "x", "2"]])
        >>> table = PivotGrouper(records, layout).group()
        >>> table.get(("a",), ("x",))[0].derive()
        3.0
    """

    def __init__(
        self, records: Iterator[list[str]], layout: PivotLayout, strict: bool = False
    ) -> None:
        """
        Initialize the grouper.

        Args:
            records: Iterator of split records (consumed once!)
            layout: Row, column and data definitions
            strict: Reject non-numeric values for numeric aggregates
        """
        self._records = records
        self._layout = layout
        self._strict = strict
        self._consumed = False

    def _ensure_not_consumed(self) -> None:
        """Raise error if records have already been consumed."""
        if self._consumed:
            raise RuntimeError(
                "PivotGrouper records have already been consumed. "
                "Create a new grouper to process again."
            )
        self._consumed = True

    def group(self) -> PivotTable:
        """
        Consume the records and build the aggregation table.

        Returns:
            The populated PivotTable
        """
        self._ensure_not_consumed()

        table = PivotTable(self._layout, strict=self._strict)
        for record in self._records:
            table.add_record(record)

        logger.info(
            "Grouped %d records into %d cells (%s row values x %s column values)",
            table.record_count,
            table.cell_count,
            "*".join(str(len(v)) for v in table.row_values),
            "*".join(str(len(v)) for v in table.col_values),
        )
        return table
