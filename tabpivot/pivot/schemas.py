# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
JSON Schema definitions for tabpivot configuration files.
"""

from typing import Any, Dict

_FIELD_LIST_SCHEMA: Dict[str, Any] = {
    "oneOf": [
        {
            "type": "string",
            "pattern": "^\\s*[0-9]+\\s*(,\\s*[0-9]+\\s*)*$",
        },
        {
            "type": "array",
            "items": {"type": "integer", "minimum": 1},
            "minItems": 1,
        },
    ]
}

_AGGREGATE_PATTERN = "\\s*[A-Za-z_][A-Za-z0-9_]*\\s*\\(\\s*[0-9]+\\s*\\)\\s*"

# Schema for a pivot config file (see tabpivot.pivot.config)
PIVOT_CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "rows": _FIELD_LIST_SCHEMA,
        "cols": _FIELD_LIST_SCHEMA,
        "data": {
            "oneOf": [
                {
                    "type": "string",
                    "pattern": f"^{_AGGREGATE_PATTERN}(,{_AGGREGATE_PATTERN})*$",
                },
                {
                    "type": "array",
                    "items": {"type": "string", "pattern": f"^{_AGGREGATE_PATTERN}$"},
                    "minItems": 1,
                },
            ]
        },
        "sort": {
            "type": "string",
            "enum": ["lexical", "numeric"],
        },
        "format": {
            "type": "string",
            "enum": ["tsv", "table", "csv", "json"],
        },
        "strict": {"type": "boolean"},
    },
    "additionalProperties": False,
}
