# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Aggregate function registry.

Maps every supported aggregate function to the sufficient statistics it
is computed from. Accumulators only track the statistics their function
depends on, so related functions (mean, variance, skew) share the same
running sums instead of keeping the raw values around.
"""

from enum import Enum


class Statistic(str, Enum):
    """A sufficient statistic tracked by an accumulator."""

    COUNT = "count"
    SUM = "sum"
    SUM2 = "sum2"
    SUM3 = "sum3"
    MIN = "min"
    MAX = "max"
    UNIQUES = "uniques"
    ALLVALUES = "allvalues"


AGGREGATE_FUNCTIONS: dict[str, frozenset[Statistic]] = {
    "count": frozenset({Statistic.COUNT}),
    "min": frozenset({Statistic.MIN}),
    "max": frozenset({Statistic.MAX}),
    "sum": frozenset({Statistic.SUM}),
    "mean": frozenset({Statistic.COUNT, Statistic.SUM}),
    "variance": frozenset({Statistic.COUNT, Statistic.SUM, Statistic.SUM2}),
    "stddev": frozenset({Statistic.COUNT, Statistic.SUM, Statistic.SUM2}),
    "skew": frozenset(
        {Statistic.COUNT, Statistic.SUM, Statistic.SUM2, Statistic.SUM3}
    ),
    "uniques": frozenset({Statistic.UNIQUES}),
    "allvalues": frozenset({Statistic.ALLVALUES}),
}

# Functions whose result is a sequence of raw values
MULTI_VALUED_FUNCTIONS = frozenset({"uniques", "allvalues"})


def normalize_function_name(name: str) -> str:
    """Lower-case and strip a function name."""
    return name.strip().lower()


def is_supported(name: str) -> bool:
    """Whether name (any case) is a registered aggregate function."""
    return normalize_function_name(name) in AGGREGATE_FUNCTIONS


def dependencies(name: str) -> frozenset[Statistic]:
    """
    Get the statistics an aggregate function depends on.

    Args:
        name: Function name, matched case-insensitively

    Returns:
        Frozen set of Statistic members

    Raises:
        KeyError: If the function is not registered
    """
    normalized = normalize_function_name(name)
    try:
        return AGGREGATE_FUNCTIONS[normalized]
    except KeyError:
        raise KeyError(f"Unknown aggregate function: {name}") from None


def supported_functions() -> list[str]:
    """Registered function names in registry order."""
    return list(AGGREGATE_FUNCTIONS)
