# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Pivot engine for tab-delimited records.

Records are grouped into (row key, column key) cells by a PivotGrouper,
the cells' accumulators are turned into a complete grid by
assemble_grid, and formatters render the grid.
"""

from .accumulator import Accumulator, NonNumericValueError, to_number
from .config import ConfigError, load_config, PivotConfig
from .formatters import format_grid
from .grid import assemble_grid, GridRow, PivotGrid
from .grouper import PivotGrouper, PivotTable
from .layout import AggregateSpec, LayoutError, PivotLayout
from .reader import RecordReader, StreamRecordReader
from .registry import AGGREGATE_FUNCTIONS, Statistic

__all__ = [
    # Aggregation
    "AGGREGATE_FUNCTIONS",
    "Statistic",
    "Accumulator",
    "NonNumericValueError",
    "to_number",

    # Layout and configuration
    "AggregateSpec",
    "LayoutError",
    "PivotLayout",
    "ConfigError",
    "PivotConfig",
    "load_config",

    # Grouping and assembly
    "PivotGrouper",
    "PivotTable",
    "GridRow",
    "PivotGrid",
    "assemble_grid",

    # Input and output
    "RecordReader",
    "StreamRecordReader",
    "format_grid",
]
