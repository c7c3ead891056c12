"""Year-on-year loading summaries by calendar or financial year."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable

from loading_insights.discovery.loading_stats import (
    UNKNOWN_KEY,
    accumulate_stats,
    group_by_dimension,
    record_field,
    to_number,
)
from loading_insights.discovery.reporting_window import financial_year_label
from loading_insights.discovery.share_of_total import share_breakdown

BASES = ("calendar", "financial")


def _record_day(record: Any) -> date | None:
    value = record_field(record, "date")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def year_key(record: Any, basis: str = "calendar") -> str:
    """Year bucket of a record: ``"2024"`` or ``"2024-25"``; UNKNOWN_KEY if undated."""
    if basis not in BASES:
        raise ValueError(f"Unknown year basis '{basis}'. Use one of: {', '.join(BASES)}")
    day = _record_day(record)
    if day is None:
        return UNKNOWN_KEY
    if basis == "financial":
        return financial_year_label(day)
    return str(day.year)


def group_by_year(records: Iterable[Any], basis: str = "calendar") -> dict[str, list]:
    """Partition records by year, newest year first and undated records last."""
    groups: dict[str, list] = {}
    for record in records:
        groups.setdefault(year_key(record, basis), []).append(record)
    ordered = sorted((k for k in groups if k != UNKNOWN_KEY), reverse=True)
    if UNKNOWN_KEY in groups:
        ordered.append(UNKNOWN_KEY)
    return {k: groups[k] for k in ordered}


def yearly_totals(records: Iterable[Any], basis: str = "calendar") -> list[dict]:
    """Per-year totals, newest first."""
    return [
        {"year": year, **accumulate_stats(rows).to_dict()}
        for year, rows in group_by_year(records, basis).items()
    ]


def yearly_dimension_totals(
    records: Iterable[Any],
    dimension: str,
    basis: str = "calendar",
    positive_tonnage_only: bool = True,
) -> list[dict]:
    """Chart rows of tonnage/wagons/freight per year and commodity or station.

    Ordered by year (newest first), then tonnage (largest first).
    """
    if positive_tonnage_only:
        records = [r for r in records if to_number(record_field(r, "tonnage")) > 0]

    result: list[dict] = []
    for year, rows in group_by_year(records, basis).items():
        per_key = [
            (key, accumulate_stats(group))
            for key, group in group_by_dimension(rows, dimension).items()
        ]
        per_key.sort(key=lambda kv: kv[1].tonnage, reverse=True)
        for key, stats in per_key:
            result.append(
                {
                    "year": year,
                    dimension: key,
                    "totalTonnage": round(stats.tonnage, 3),
                    "totalWagons": round(stats.wagons, 3),
                    "totalFreight": round(stats.freight, 2),
                }
            )
    return result


def yearly_share_breakdown(
    records: Iterable[Any],
    basis: str = "financial",
    limit: int = 2,
    digits: int = 1,
) -> list[dict]:
    """Commodity/station share breakdown for the latest *limit* dated years."""
    years = [
        (year, rows)
        for year, rows in group_by_year(records, basis).items()
        if year != UNKNOWN_KEY
    ]
    return [
        {"year": year, **share_breakdown(rows, digits=digits).to_dict()}
        for year, rows in years[:limit]
    ]
