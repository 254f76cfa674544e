# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Pivot layout: which input fields form the row axis, the column axis,
and which aggregate functions are computed over which fields.

Field indices are 1-based on the command line and 0-based internally.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Union

from tabpivot.pivot.registry import (
    is_supported,
    normalize_function_name,
    supported_functions,
)

_AGGREGATE_TOKEN = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*\(\s*(\d+)\s*\)\s*$")


class LayoutError(ValueError):
    """Raised for malformed row, column, or data definitions."""

    pass


@dataclass(frozen=True)
class AggregateSpec:
    """One aggregate function applied to one input field."""

    function: str
    field_index: int

    @property
    def label(self) -> str:
        """Textual form used as the function label in output."""
        return f"{self.function}({self.field_index + 1})"


@dataclass(frozen=True)
class PivotLayout:
    """
    Row, column and data definitions of a pivot.

    Attributes:
        row_fields: 0-based indices of the row-key fields, in order
        col_fields: 0-based indices of the column-key fields, in order
        aggregates: Aggregate slots, in output order
    """

    row_fields: tuple[int, ...]
    col_fields: tuple[int, ...]
    aggregates: tuple[AggregateSpec, ...]

    def __post_init__(self) -> None:
        if not self.row_fields:
            raise LayoutError("At least one row field is required")
        if not self.col_fields:
            raise LayoutError("At least one column field is required")
        if not self.aggregates:
            raise LayoutError("At least one data definition is required")

    @property
    def multi_function(self) -> bool:
        """Whether each row key expands into one output row per function."""
        return len(self.aggregates) > 1

    @property
    def max_field_index(self) -> int:
        """Largest 0-based field index any definition reads."""
        return max(
            self.row_fields
            + self.col_fields
            + tuple(a.field_index for a in self.aggregates)
        )

    @property
    def labels(self) -> list[str]:
        return [a.label for a in self.aggregates]

    @classmethod
    def parse(cls, rows: str, cols: str, data: str) -> "PivotLayout":
        """
        Build a layout from the three command-line definition strings.

        Example:
            >>> PivotLayout.parse("1", "2", "sum(4)").aggregates
            (AggregateSpec(function='sum', field_index=3),)
        """
        return cls(
            row_fields=parse_field_list(rows, "row"),
            col_fields=parse_field_list(cols, "column"),
            aggregates=parse_aggregates(data),
        )


def parse_field_list(
    value: Union[str, Iterable[int]], axis: str = "field"
) -> tuple[int, ...]:
    """
    Parse a comma-separated list of 1-based field indices.

    Args:
        value: String such as "1,3", or an iterable of 1-based integers
        axis: Axis name used in error messages

    Returns:
        Tuple of 0-based field indices

    Raises:
        LayoutError: If the list is empty or holds a non-positive or
            non-integer entry
    """
    if isinstance(value, str):
        tokens: list = [t.strip() for t in value.split(",")]
    else:
        tokens = list(value)

    if not tokens or tokens == [""]:
        raise LayoutError(f"Empty {axis} definition")

    indices = []
    for token in tokens:
        if isinstance(token, bool):
            raise LayoutError(f"Invalid {axis} index: {token!r}")
        if isinstance(token, int):
            index = token
        elif isinstance(token, str) and token.isascii() and token.isdigit():
            index = int(token)
        else:
            raise LayoutError(
                f"Invalid {axis} index: {token!r}. "
                "Expected comma-separated positive integers (e.g. '1,3')"
            )
        if index < 1:
            raise LayoutError(f"Invalid {axis} index: {index}. Indices start at 1")
        indices.append(index - 1)
    return tuple(indices)


def parse_aggregate(token: str) -> AggregateSpec:
    """
    Parse a single 'function(field)' token.

    Raises:
        LayoutError: If the token is malformed or names an unknown function
    """
    match = _AGGREGATE_TOKEN.match(token)
    if match is None:
        raise LayoutError(
            f"Invalid data definition: {token.strip()!r}. "
            "Expected 'function(field)', e.g. 'sum(4)'. "
            f"Supported functions: {', '.join(supported_functions())}"
        )
    name, index = match.groups()
    if not is_supported(name):
        raise LayoutError(
            f"Unknown aggregate function: {name!r}. "
            f"Supported functions: {', '.join(supported_functions())}"
        )
    if int(index) < 1:
        raise LayoutError(f"Invalid data field index: {index}. Indices start at 1")
    return AggregateSpec(normalize_function_name(name), int(index) - 1)


def parse_aggregates(value: Union[str, Iterable[str]]) -> tuple[AggregateSpec, ...]:
    """
    Parse comma-separated 'function(field)' tokens.

    Args:
        value: String such as "sum(4),count(4)", or an iterable of tokens

    Returns:
        Aggregate slots in the given order

    Raises:
        LayoutError: If empty or any token is invalid
    """
    tokens = value.split(",") if isinstance(value, str) else list(value)
    if not [t for t in tokens if t.strip()]:
        raise LayoutError("Empty data definition")
    return tuple(parse_aggregate(t) for t in tokens)
