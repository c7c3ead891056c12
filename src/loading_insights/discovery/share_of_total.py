"""Share of total — what fraction of loading each commodity and station carries.

Commodity shares are relative to the grand total; station shares are
relative to their parent commodity. Zero or missing denominators give 0.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from loading_insights.discovery.loading_stats import (
    StatTuple,
    accumulate_stats,
    group_by_dimension,
    to_number,
)


@dataclass
class StationShare:
    station: str
    stats: StatTuple
    wagons_pct: float
    tonnage_pct: float
    freight_pct: float

    def to_dict(self) -> dict:
        return {
            "station": self.station,
            **self.stats.to_dict(),
            "wagonsPercentage": self.wagons_pct,
            "tonnagePercentage": self.tonnage_pct,
            "freightPercentage": self.freight_pct,
        }


@dataclass
class CommodityShare:
    commodity: str
    stats: StatTuple
    wagons_pct: float
    tonnage_pct: float
    freight_pct: float
    stations: list[StationShare] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "commodity": self.commodity,
            **self.stats.to_dict(),
            "wagonsPercentage": self.wagons_pct,
            "tonnagePercentage": self.tonnage_pct,
            "freightPercentage": self.freight_pct,
            "stations": [s.to_dict() for s in self.stations],
        }


@dataclass
class ShareBreakdown:
    totals: StatTuple
    commodities: list[CommodityShare]

    def to_dict(self) -> dict:
        return {
            "totals": self.totals.to_dict(),
            "data": [c.to_dict() for c in self.commodities],
        }


def percentage_of_total(numerator: Any, denominator: Any, digits: int = 2) -> float:
    """Return numerator as a percentage of denominator.

    A zero, None or non-numeric denominator yields 0.0, so callers never see
    NaN or Infinity.
    """
    denom = to_number(denominator)
    if denom == 0:
        return 0.0
    return round(to_number(numerator) / denom * 100, digits)


def _shares(part: StatTuple, whole: StatTuple, digits: int) -> tuple[float, float, float]:
    return (
        percentage_of_total(part.wagons, whole.wagons, digits),
        percentage_of_total(part.tonnage, whole.tonnage, digits),
        percentage_of_total(part.freight, whole.freight, digits),
    )


def _by_tonnage(groups: dict[str, list]) -> list[tuple[str, StatTuple]]:
    folded = [(key, accumulate_stats(rows)) for key, rows in groups.items()]
    folded.sort(key=lambda kv: kv[1].tonnage, reverse=True)
    return folded


def share_breakdown(records: Iterable[Any], digits: int = 1) -> ShareBreakdown:
    """Commodity shares of the grand total, each with station sub-shares.

    Commodities and the stations under each are ordered by tonnage,
    largest first.
    """
    records = list(records)
    grand = accumulate_stats(records)

    commodities: list[CommodityShare] = []
    by_commodity = group_by_dimension(records, "commodity")
    for commodity, stats in _by_tonnage(by_commodity):
        wagons_pct, tonnage_pct, freight_pct = _shares(stats, grand, digits)
        stations = []
        for station, st_stats in _by_tonnage(group_by_dimension(by_commodity[commodity], "station")):
            s_wagons, s_tonnage, s_freight = _shares(st_stats, stats, digits)
            stations.append(StationShare(station, st_stats, s_wagons, s_tonnage, s_freight))
        commodities.append(
            CommodityShare(
                commodity=commodity,
                stats=stats,
                wagons_pct=wagons_pct,
                tonnage_pct=tonnage_pct,
                freight_pct=freight_pct,
                stations=stations,
            )
        )

    return ShareBreakdown(totals=grand, commodities=commodities)


def dimension_summary(records: Iterable[Any], dimension: str) -> list[dict]:
    """All-time totals per commodity or station, largest tonnage first."""
    return [
        {dimension: key, **stats.to_dict()}
        for key, stats in _by_tonnage(group_by_dimension(records, dimension))
    ]
