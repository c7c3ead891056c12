"""Period-over-period comparison of loading by commodity or station.

Pure functions that pair a current and a comparison record set per
dimension key, compute per-day averages and tonnage variation, and roll
the rows up into a totals row. Rounding is applied once, when rows are
built; totals are recomputed from the unrounded sums.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from loading_insights.discovery.loading_stats import (
    StatTuple,
    accumulate_stats,
    group_by_dimension,
)

# Decimal places at the output boundary
_TONNAGE_DIGITS = 3
_WAGON_DIGITS = 3
_FREIGHT_DIGITS = 2
_AVERAGE_DIGITS = 2
_PERCENT_DIGITS = 2


@dataclass
class PeriodStats:
    """One side (current or comparison) of a comparison row."""

    runs: int
    avg_per_day: float
    wagons: float
    tonnage: float
    freight: float

    def to_dict(self) -> dict:
        return {
            "runs": self.runs,
            "avgPerDay": self.avg_per_day,
            "wagons": self.wagons,
            "tonnage": self.tonnage,
            "freight": self.freight,
        }


@dataclass
class TotalsRow:
    """Grand totals across all comparison rows."""

    current: PeriodStats
    previous: PeriodStats
    change_in_units: float
    change_in_percent: float

    def to_dict(self) -> dict:
        return {
            "current": self.current.to_dict(),
            "previous": self.previous.to_dict(),
            "changeInUnits": self.change_in_units,
            "changeInPercent": self.change_in_percent,
        }


@dataclass
class ComparisonRow:
    """Current vs comparison statistics for a single commodity or station."""

    key: str
    current: PeriodStats
    previous: PeriodStats
    change_in_units: float
    change_in_percent: float
    # Unrounded folds; None on rows built by hand, which fall back to the rounded stats
    current_totals: StatTuple | None = field(default=None, repr=False, compare=False)
    previous_totals: StatTuple | None = field(default=None, repr=False, compare=False)

    def sums(self) -> tuple[StatTuple, StatTuple]:
        """(current, previous) totals to roll up, preferring the unrounded folds."""
        cur = self.current_totals if self.current_totals is not None else _as_stat_tuple(self.current)
        prev = self.previous_totals if self.previous_totals is not None else _as_stat_tuple(self.previous)
        return cur, prev

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "current": self.current.to_dict(),
            "previous": self.previous.to_dict(),
            "changeInUnits": self.change_in_units,
            "changeInPercent": self.change_in_percent,
        }


@dataclass
class ComparisonResult:
    """Rows plus totals for one dimension."""

    dimension: str
    rows: list[ComparisonRow]
    totals: TotalsRow
    current_days: int
    previous_days: int

    def to_dict(self) -> dict:
        return {
            "dimension": self.dimension,
            "currentDays": self.current_days,
            "previousDays": self.previous_days,
            "rows": [r.to_dict() for r in self.rows],
            "totals": self.totals.to_dict(),
        }


def _as_stat_tuple(stats: PeriodStats) -> StatTuple:
    return StatTuple(
        runs=stats.runs, wagons=stats.wagons, tonnage=stats.tonnage, freight=stats.freight
    )


def average_per_day(runs: float, days: int) -> float:
    """Runs per day; 0 when the day count is not positive."""
    if days > 0:
        return runs / days
    return 0.0


def tonnage_variation(current: float, previous: float) -> tuple[float, float]:
    """Return (change in units, change in percent) for tonnage.

    A key with no comparison tonnage reports +100% when it has current
    tonnage and 0% otherwise.
    """
    units = current - previous
    if previous > 0:
        pct = units / previous * 100
    elif current > 0:
        pct = 100.0
    else:
        pct = 0.0
    return units, pct


def _period_stats(stats: StatTuple, days: int) -> PeriodStats:
    return PeriodStats(
        runs=stats.runs,
        avg_per_day=round(average_per_day(stats.runs, days), _AVERAGE_DIGITS),
        wagons=round(stats.wagons, _WAGON_DIGITS),
        tonnage=round(stats.tonnage, _TONNAGE_DIGITS),
        freight=round(stats.freight, _FREIGHT_DIGITS),
    )


def compare_periods(
    current_records: Iterable[Any],
    previous_records: Iterable[Any],
    current_days: int,
    previous_days: int,
    dimension: str,
) -> list[ComparisonRow]:
    """Build one comparison row per key seen in either period.

    Keys from the current period come first in first-seen order, followed
    by keys only present in the comparison period.
    """
    current_groups = group_by_dimension(current_records, dimension)
    previous_groups = group_by_dimension(previous_records, dimension)

    keys = list(current_groups)
    keys.extend(k for k in previous_groups if k not in current_groups)

    rows: list[ComparisonRow] = []
    for key in keys:
        cur = accumulate_stats(current_groups.get(key, []))
        prev = accumulate_stats(previous_groups.get(key, []))
        units, pct = tonnage_variation(cur.tonnage, prev.tonnage)
        rows.append(
            ComparisonRow(
                key=key,
                current=_period_stats(cur, current_days),
                previous=_period_stats(prev, previous_days),
                change_in_units=round(units, _TONNAGE_DIGITS),
                change_in_percent=round(pct, _PERCENT_DIGITS),
                current_totals=cur,
                previous_totals=prev,
            )
        )
    return rows


def rollup_totals(
    rows: Iterable[ComparisonRow],
    current_days: int,
    previous_days: int,
) -> TotalsRow:
    """Sum rows field-wise and recompute averages and variation from the sums.

    Per-row averages and percentages are never summed or averaged.
    """
    cur = StatTuple.zero()
    prev = StatTuple.zero()
    for row in rows:
        row_cur, row_prev = row.sums()
        cur = cur + row_cur
        prev = prev + row_prev

    units, pct = tonnage_variation(cur.tonnage, prev.tonnage)
    return TotalsRow(
        current=_period_stats(cur, current_days),
        previous=_period_stats(prev, previous_days),
        change_in_units=round(units, _TONNAGE_DIGITS),
        change_in_percent=round(pct, _PERCENT_DIGITS),
    )


def compute_comparison(
    current_records: Iterable[Any],
    previous_records: Iterable[Any],
    current_days: int,
    previous_days: int,
    dimension: str,
    sort_by: str | None = "tonnage",
) -> ComparisonResult:
    """Compare two periods along *dimension* and attach grand totals.

    Args:
        current_records: Records of the current window.
        previous_records: Records of the comparison window.
        current_days: Inclusive day count of the current window.
        previous_days: Inclusive day count of the comparison window.
        dimension: "commodity" or "station".
        sort_by: Current-period field to order rows by (descending), or
            None to keep first-seen order. The sort is stable.

    Returns:
        ComparisonResult with rows and totals.
    """
    rows = compare_periods(
        current_records, previous_records, current_days, previous_days, dimension
    )
    if sort_by is not None:
        if sort_by not in ("runs", "wagons", "tonnage", "freight"):
            raise ValueError(f"Cannot sort comparison rows by '{sort_by}'")
        rows.sort(key=lambda r: getattr(r.sums()[0], sort_by), reverse=True)

    return ComparisonResult(
        dimension=dimension,
        rows=rows,
        totals=rollup_totals(rows, current_days, previous_days),
        current_days=current_days,
        previous_days=previous_days,
    )
