"""
app/services/column_rollup.py

Online per-column numeric statistics.

Only ``count``, ``sum``, ``min`` and ``max`` are stored; ``avg`` is derived
when a snapshot is read.  The fold is associative and commutative per
column, so chunks may be accumulated separately and merged in any grouping
with identical results.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class ColumnStats:
    """
    Running statistics for one column.

    ``min``/``max`` start at the ``+inf``/``-inf`` sentinels and only tighten.
    """

    count: int = 0
    sum: float = 0.0
    min: float = math.inf
    max: float = -math.inf

    @property
    def avg(self) -> float:
        if self.count == 0:
            return 0.0
        return self.sum / self.count

    def combine(self, other: "ColumnStats") -> "ColumnStats":
        return ColumnStats(
            count=self.count + other.count,
            sum=self.sum + other.sum,
            min=min(self.min, other.min),
            max=max(self.max, other.max),
        )


@dataclass(frozen=True)
class RollupRow:
    """
    Externally visible summary of one column.

    ``min``/``max`` are ``None`` instead of the infinite sentinels when the
    column has not seen a numeric value.
    """

    column: str
    count: int
    sum: float
    min: float | None
    max: float | None
    avg: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "column": self.column,
            "count": self.count,
            "sum": self.sum,
            "min": self.min,
            "max": self.max,
            "avg": self.avg,
        }


def update_stats(stats: ColumnStats | None, value: float) -> ColumnStats:
    """
    Fold one numeric observation into ``stats`` and return the new value.
    """

    current = stats or ColumnStats()
    return ColumnStats(
        count=current.count + 1,
        sum=current.sum + value,
        min=min(current.min, value),
        max=max(current.max, value),
    )


def is_numeric_value(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and math.isfinite(value)


class ColumnRollupAccumulator:
    """
    Mutable holder of :class:`ColumnStats` keyed by column name.

    Non-numeric and empty values are skipped: they neither create nor
    update a column's statistics.
    """

    def __init__(self) -> None:
        self._stats: dict[str, ColumnStats] = {}

    def __len__(self) -> int:
        return len(self._stats)

    def update_row(self, row: Mapping[str, Any]) -> None:
        for column, value in row.items():
            if is_numeric_value(value):
                self._stats[column] = update_stats(self._stats.get(column), float(value))

    def update_rows(self, rows: Iterable[Mapping[str, Any]]) -> None:
        for row in rows:
            self.update_row(row)

    def merge(self, other: "ColumnRollupAccumulator") -> "ColumnRollupAccumulator":
        """
        Return a new accumulator holding the union of both folds.
        """

        merged = ColumnRollupAccumulator()
        merged._stats = dict(self._stats)
        for column, stats in other._stats.items():
            existing = merged._stats.get(column)
            merged._stats[column] = stats if existing is None else existing.combine(stats)
        return merged

    def stats(self) -> dict[str, ColumnStats]:
        return dict(self._stats)

    def get(self, column: str) -> RollupRow:
        return _to_rollup_row(column, self._stats.get(column, ColumnStats()))

    def snapshot(self) -> list[RollupRow]:
        return [_to_rollup_row(column, stats) for column, stats in self._stats.items()]


def _to_rollup_row(column: str, stats: ColumnStats) -> RollupRow:
    empty = stats.count == 0
    return RollupRow(
        column=column,
        count=stats.count,
        sum=stats.sum,
        min=None if empty else stats.min,
        max=None if empty else stats.max,
        avg=stats.avg,
    )
