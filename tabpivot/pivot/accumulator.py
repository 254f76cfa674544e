# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Per-cell accumulators for pivot aggregation.

An Accumulator folds raw field values into the sufficient statistics its
aggregate function depends on, and derives the function's result from
those statistics once the input is exhausted.
"""

import math
import re
import sys
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from tabpivot.log import get_logger
from tabpivot.pivot.registry import dependencies, normalize_function_name, Statistic

logger = get_logger(__name__)

CellValue = Union[int, float, str, list[str]]

# Leading numeric prefix of a string, the way scripting languages read
# "12abc" as 12 and "abc" as 0.
_NUMBER_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)

# Variance below this fraction of E[x^2] is cancellation noise.
_ROUNDING_SLACK = 64 * sys.float_info.epsilon


class NonNumericValueError(ValueError):
    """Raised in strict mode when a numeric aggregate sees a non-number."""

    def __init__(
        self,
        value: str,
        record: Optional[int] = None,
        field_index: Optional[int] = None,
    ) -> None:
        self.value = value
        self.record = record
        self.field_index = field_index
        location = []
        if record is not None:
            location.append(f"record {record}")
        if field_index is not None:
            location.append(f"field {field_index}")
        where = f" ({', '.join(location)})" if location else ""
        super().__init__(f"Non-numeric value {value!r}{where}")


def numeric_prefix(raw: str) -> Optional[float]:
    """Value of the leading numeric prefix of raw, or None if it has none."""
    match = _NUMBER_PREFIX.match(raw)
    return float(match.group(1)) if match is not None else None


def to_number(raw: str, strict: bool = False) -> float:
    """
    Convert a raw field value to a float.

    Lenient mode reads the leading numeric prefix and falls back to 0.0
    when there is none. Strict mode accepts only a complete number.

    Args:
        raw: Raw field value
        strict: Reject values that are not entirely numeric

    Returns:
        The numeric value

    Raises:
        NonNumericValueError: In strict mode, if raw is not a number
    """
    match = _NUMBER_PREFIX.match(raw)
    if strict:
        if match is None or match.end() != len(raw.rstrip()):
            raise NonNumericValueError(raw)
        return float(match.group(1))
    if match is None:
        logger.debug("Coercing non-numeric value %r to 0", raw)
        return 0.0
    if match.end() != len(raw.rstrip()):
        logger.debug("Coercing %r to its numeric prefix %s", raw, match.group(1))
    return float(match.group(1))


@dataclass
class SufficientStatistics:
    """
    Running statistics for one aggregate slot of one cell.

    A field left at None was never requested by the slot's function,
    which is different from a populated zero.
    """

    count: Optional[int] = None
    total: Optional[float] = None
    sum2: Optional[float] = None
    sum3: Optional[float] = None
    # (numeric value, raw value) of the extremes
    minimum: Optional[tuple[float, str]] = None
    maximum: Optional[tuple[float, str]] = None
    uniques: Optional[dict[str, None]] = None
    allvalues: Optional[list[str]] = None
    # Statistics this slot tracks; min/max stay None until first seen
    tracked: frozenset[Statistic] = field(default_factory=frozenset)

    @classmethod
    def for_statistics(cls, tracked: frozenset[Statistic]) -> "SufficientStatistics":
        """Create statistics with exactly the tracked fields initialized."""
        stats = cls(tracked=tracked)
        if Statistic.COUNT in tracked:
            stats.count = 0
        if Statistic.SUM in tracked:
            stats.total = 0.0
        if Statistic.SUM2 in tracked:
            stats.sum2 = 0.0
        if Statistic.SUM3 in tracked:
            stats.sum3 = 0.0
        if Statistic.UNIQUES in tracked:
            stats.uniques = {}
        if Statistic.ALLVALUES in tracked:
            stats.allvalues = []
        return stats

    def is_populated(self, statistic: Statistic) -> bool:
        """Whether a statistic holds a value."""
        return getattr(self, _FIELD_BY_STATISTIC[statistic]) is not None

    def merge(self, other: "SufficientStatistics") -> None:
        """Fold statistics gathered over another partition into this one."""
        if other.tracked != self.tracked:
            raise ValueError("Cannot merge statistics tracking different values")
        if self.count is not None and other.count is not None:
            self.count += other.count
        if self.total is not None and other.total is not None:
            self.total += other.total
        if self.sum2 is not None and other.sum2 is not None:
            self.sum2 += other.sum2
        if self.sum3 is not None and other.sum3 is not None:
            self.sum3 += other.sum3
        if other.minimum is not None and (
            self.minimum is None or other.minimum[0] < self.minimum[0]
        ):
            self.minimum = other.minimum
        if other.maximum is not None and (
            self.maximum is None or other.maximum[0] > self.maximum[0]
        ):
            self.maximum = other.maximum
        if self.uniques is not None and other.uniques is not None:
            self.uniques.update(other.uniques)
        if self.allvalues is not None and other.allvalues is not None:
            self.allvalues.extend(other.allvalues)


_FIELD_BY_STATISTIC = {
    Statistic.COUNT: "count",
    Statistic.SUM: "total",
    Statistic.SUM2: "sum2",
    Statistic.SUM3: "sum3",
    Statistic.MIN: "minimum",
    Statistic.MAX: "maximum",
    Statistic.UNIQUES: "uniques",
    Statistic.ALLVALUES: "allvalues",
}

_NUMERIC_STATISTICS = frozenset(
    {Statistic.SUM, Statistic.SUM2, Statistic.SUM3, Statistic.MIN, Statistic.MAX}
)


def _raw_moments(
    stats: SufficientStatistics,
) -> Optional[tuple[float, float, Optional[float]]]:
    """Return (E[x], E[x^2], E[x^3]) or None when nothing was counted."""
    if not stats.count or stats.total is None or stats.sum2 is None:
        return None
    n = stats.count
    e3 = stats.sum3 / n if stats.sum3 is not None else None
    return stats.total / n, stats.sum2 / n, e3


def _variance(e1: float, e2: float) -> float:
    variance = e2 - e1 * e1
    if variance <= abs(e2) * _ROUNDING_SLACK:
        return 0.0
    return variance


def _derive_count(stats: SufficientStatistics) -> Optional[CellValue]:
    return stats.count


def _derive_min(stats: SufficientStatistics) -> Optional[CellValue]:
    return stats.minimum[1] if stats.minimum is not None else None


def _derive_max(stats: SufficientStatistics) -> Optional[CellValue]:
    return stats.maximum[1] if stats.maximum is not None else None


def _derive_sum(stats: SufficientStatistics) -> Optional[CellValue]:
    return stats.total


def _derive_mean(stats: SufficientStatistics) -> Optional[CellValue]:
    if not stats.count or stats.total is None:
        return None
    return stats.total / stats.count


def _derive_variance(stats: SufficientStatistics) -> Optional[CellValue]:
    moments = _raw_moments(stats)
    if moments is None:
        return None
    e1, e2, _ = moments
    return _variance(e1, e2)


def _derive_stddev(stats: SufficientStatistics) -> Optional[CellValue]:
    moments = _raw_moments(stats)
    if moments is None:
        return None
    e1, e2, _ = moments
    return math.sqrt(_variance(e1, e2))


def _derive_skew(stats: SufficientStatistics) -> Optional[CellValue]:
    moments = _raw_moments(stats)
    if moments is None or moments[2] is None:
        return None
    e1, e2, e3 = moments
    stddev = math.sqrt(_variance(e1, e2))
    # The cube of a tiny stddev can underflow to 0
    cubed = stddev * stddev * stddev
    if cubed == 0:
        return None
    skew = (e3 - 3 * e1 * e2 + 2 * e1 * e1 * e1) / cubed
    # Moments of huge values overflow to inf and leave no usable result
    return skew if math.isfinite(skew) else None


def _derive_uniques(stats: SufficientStatistics) -> Optional[CellValue]:
    return list(stats.uniques) if stats.uniques is not None else None


def _derive_allvalues(stats: SufficientStatistics) -> Optional[CellValue]:
    return list(stats.allvalues) if stats.allvalues is not None else None


_DERIVERS: dict[str, Callable[[SufficientStatistics], Optional[CellValue]]] = {
    "count": _derive_count,
    "min": _derive_min,
    "max": _derive_max,
    "sum": _derive_sum,
    "mean": _derive_mean,
    "variance": _derive_variance,
    "stddev": _derive_stddev,
    "skew": _derive_skew,
    "uniques": _derive_uniques,
    "allvalues": _derive_allvalues,
}


class Accumulator:
    """
    Incremental state for one aggregate function over one cell.

    Example:
        >>> acc = Accumulator("mean")
        >>> for value in ["1", "2", "6"]:
        ...     acc.update(value)
        >>> acc.derive()
        3.0
    """

    __slots__ = ("function", "stats", "strict", "_numeric", "_derive")

    def __init__(self, function: str, strict: bool = False) -> None:
        """
        Initialize an accumulator.

        Args:
            function: Aggregate function name (any case)
            strict: Reject non-numeric values for numeric statistics

        Raises:
            KeyError: If the function is not registered
        """
        self.function = normalize_function_name(function)
        tracked = dependencies(self.function)
        self.stats = SufficientStatistics.for_statistics(tracked)
        self.strict = strict
        self._numeric = bool(tracked & _NUMERIC_STATISTICS)
        self._derive = _DERIVERS[self.function]

    def update(self, raw: str) -> None:
        """
        Fold one observed raw value into the tracked statistics.

        Raises:
            NonNumericValueError: In strict mode, for a non-numeric value
                fed to a numeric statistic
        """
        stats = self.stats
        tracked = stats.tracked
        value = to_number(raw, self.strict) if self._numeric else 0.0

        if Statistic.COUNT in tracked:
            stats.count += 1
        if Statistic.SUM in tracked:
            stats.total += value
        if Statistic.SUM2 in tracked:
            stats.sum2 += value * value
        if Statistic.SUM3 in tracked:
            stats.sum3 += value * value * value
        if Statistic.MIN in tracked:
            if stats.minimum is None or value < stats.minimum[0]:
                stats.minimum = (value, raw)
        if Statistic.MAX in tracked:
            if stats.maximum is None or value > stats.maximum[0]:
                stats.maximum = (value, raw)
        if Statistic.UNIQUES in tracked:
            stats.uniques[raw] = None
        if Statistic.ALLVALUES in tracked:
            stats.allvalues.append(raw)

    def derive(self) -> Optional[CellValue]:
        """
        Compute the function's result.

        Returns:
            The aggregate value, or None when it is undefined (nothing
            observed, or skew over a zero standard deviation)
        """
        return self._derive(self.stats)

    def merge(self, other: "Accumulator") -> None:
        """Fold another accumulator for the same function into this one."""
        if other.function != self.function:
            raise ValueError(
                f"Cannot merge {other.function} accumulator into {self.function}"
            )
        self.stats.merge(other.stats)

    def __repr__(self) -> str:
        return f"Accumulator({self.function!r}, derive={self.derive()!r})"
