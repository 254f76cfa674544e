# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Pivot configuration.

A pivot can be described entirely on the command line or in a JSON
config file; command-line options take precedence over file values.

Example config file:
    {
        "rows": [1],
        "cols": "2",
        "data": ["sum(4)", "count(4)"],
        "sort": "lexical",
        "format": "tsv"
    }
"""

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional, Union

import jsonschema

from tabpivot.pivot.grid import DEFAULT_SORT
from tabpivot.pivot.layout import (
    LayoutError,
    parse_aggregates,
    parse_field_list,
    PivotLayout,
)
from tabpivot.pivot.schemas import PIVOT_CONFIG_SCHEMA

FieldList = Union[str, list[int]]
AggregateList = Union[str, list[str]]


class ConfigError(ValueError):
    """Raised when a config file cannot be read or fails validation."""

    pass


@dataclass(frozen=True)
class PivotConfig:
    """Settings of one pivot run."""

    rows: Optional[FieldList] = None
    cols: Optional[FieldList] = None
    data: Optional[AggregateList] = None
    sort: str = DEFAULT_SORT
    output_format: str = "tsv"
    strict: bool = False

    def with_overrides(self, **overrides: Any) -> "PivotConfig":
        """Return a copy with every override that is not None applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def layout(self) -> PivotLayout:
        """
        Build the pivot layout.

        Raises:
            LayoutError: If a definition is missing or malformed
        """
        definitions = (("rows", self.rows), ("cols", self.cols), ("data", self.data))
        missing = [name for name, value in definitions if value is None]
        if missing:
            raise LayoutError(f"Missing pivot definition: {', '.join(missing)}")
        return PivotLayout(
            row_fields=parse_field_list(self.rows, "row"),
            col_fields=parse_field_list(self.cols, "column"),
            aggregates=parse_aggregates(self.data),
        )


def load_config(config_path: Union[str, Path]) -> PivotConfig:
    """
    Load and validate a pivot config file.

    Args:
        config_path: Path to the JSON config file

    Returns:
        The parsed PivotConfig

    Raises:
        ConfigError: If the file is not valid JSON or fails schema validation
        FileNotFoundError: If the file does not exist
    """
    config_path = Path(config_path)
    with open(config_path, encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config '{config_path}': {e}") from e

    try:
        jsonschema.validate(raw, PIVOT_CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ConfigError(f"Invalid config '{config_path}': {e.message}") from e

    return PivotConfig(
        rows=raw.get("rows"),
        cols=raw.get("cols"),
        data=raw.get("data"),
        sort=raw.get("sort", DEFAULT_SORT),
        output_format=raw.get("format", "tsv"),
        strict=raw.get("strict", False),
    )
