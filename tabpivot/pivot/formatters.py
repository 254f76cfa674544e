# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Grid formatting utilities for different output formats.

Provides functions to format an assembled pivot grid as tab-separated
text, an aligned table, CSV, or JSON. All functions are pure (no side
effects) and return strings.
"""

import csv
import io
import json
from typing import Any

from tabulate import tabulate

from tabpivot.pivot.grid import PivotGrid

OUTPUT_FORMATS = ["tsv", "table", "csv", "json"]

# Separator between the items of a multi-valued cell
VALUE_SEPARATOR = ","


def format_number(value: float) -> str:
    """
    Format a float with up to 15 significant digits.

    Integral values print without a fractional part (444.0 -> "444").
    """
    return f"{value:.15g}"


def format_value(value: Any) -> str:
    """
    Format a cell value for display.

    Handles special cases:
    - None -> empty string
    - float -> up to 15 significant digits
    - list -> comma-separated values
    - other -> str()

    Args:
        value: Derived aggregate value

    Returns:
        String representation suitable for display
    """
    if value is None:
        return ""
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, list):
        return VALUE_SEPARATOR.join(str(v) for v in value)
    return str(value)


def grid_to_rows(grid: PivotGrid) -> list[list[str]]:
    """
    Lay out a grid as rows of strings.

    Header lines come first, one per column field, shifted right past
    the row key columns (and the function label column when several
    functions are requested). Continuation rows of the same row key
    leave the key columns blank.

    Args:
        grid: Assembled pivot grid

    Returns:
        List of rows, each a list of cell strings
    """
    lines: list[list[str]] = []
    prefix = [""] * grid.leading_columns

    for header in grid.header_lines:
        lines.append(prefix + header)

    for row in grid.rows:
        if row.first:
            lead = list(row.row_key)
        else:
            lead = [""] * len(row.row_key)
        if grid.multi_function:
            lead.append(row.label)
        lines.append(lead + [format_value(v) for v in row.values])

    return lines


def format_grid_tsv(grid: PivotGrid) -> str:
    """
    Format a grid as tab-separated lines.

    Args:
        grid: Assembled pivot grid

    Returns:
        Tab-separated text, one line per header or body row
    """
    return "\n".join("\t".join(line) for line in grid_to_rows(grid))


def format_grid_table(grid: PivotGrid) -> str:
    """
    Format a grid as a plain text table with aligned columns.

    Args:
        grid: Assembled pivot grid

    Returns:
        Formatted table string
    """
    if not grid.rows:
        return "No records found."

    return tabulate(grid_to_rows(grid), tablefmt="plain", disable_numparse=True)


def format_grid_csv(grid: PivotGrid) -> str:
    """
    Format a grid as CSV.

    Args:
        grid: Assembled pivot grid

    Returns:
        CSV formatted string
    """
    output = io.StringIO(newline="")
    writer = csv.writer(output)

    for line in grid_to_rows(grid):
        writer.writerow(line)

    return output.getvalue().rstrip("\r\n").replace("\r\n", "\n").replace("\r", "")


def grid_to_dict(grid: PivotGrid) -> dict[str, Any]:
    """
    Convert a grid to a JSON-serializable dict.

    Returns:
        {"columns": [...], "rows": [{"key", "function", "values"}, ...]}
    """
    return {
        "columns": [list(col_key) for col_key in grid.col_keys],
        "rows": [
            {
                "key": list(row.row_key),
                "function": row.label,
                "values": row.values,
            }
            for row in grid.rows
        ],
    }


def format_grid_json(grid: PivotGrid) -> str:
    """
    Format a grid as JSON.

    Args:
        grid: Assembled pivot grid

    Returns:
        JSON formatted string (pretty-printed object)
    """
    return json.dumps(grid_to_dict(grid), indent=2)


FORMATTERS = {
    "tsv": format_grid_tsv,
    "table": format_grid_table,
    "csv": format_grid_csv,
    "json": format_grid_json,
}


def format_grid(grid: PivotGrid, output_format: str = "tsv") -> str:
    """
    Format a grid in the requested output format.

    Raises:
        ValueError: If output_format is unknown
    """
    try:
        formatter = FORMATTERS[output_format]
    except KeyError:
        raise ValueError(
            f"Unknown output format: {output_format}. "
            f"Valid formats: {', '.join(OUTPUT_FORMATS)}"
        ) from None
    return formatter(grid)
