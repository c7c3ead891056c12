"""Loading statistics — fold raw loading records into run/wagon/tonnage/freight totals.

Pure functions shared by every comparative and share-of-total report:
record field access, numeric coercion, grouping by commodity or station,
and reduction of a record list into a single StatTuple.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Mapping

DIMENSIONS = ("commodity", "station")
UNKNOWN_KEY = "Unknown"

# Alternate spellings accepted when a record arrives as a plain dict
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("date", "p_date", "pDate"),
    "commodity": ("commodity",),
    "station": ("station",),
    "wagons": ("wagons",),
    "tonnage": ("tonnage",),
    "freight": ("freight",),
}


@dataclass(frozen=True)
class OperationRecord:
    """One rake loading movement as seen by the analytics core."""

    date: datetime | date | None = None
    commodity: str | None = None
    station: str | None = None
    wagons: Any = None
    tonnage: Any = None
    freight: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> OperationRecord:
        """Build a record from a dict using snake_case or camelCase keys."""
        return cls(**{name: _lookup(data, name) for name in _FIELD_ALIASES})


@dataclass(frozen=True)
class StatTuple:
    """Aggregated statistics for a group of records."""

    runs: int = 0
    wagons: float = 0.0
    tonnage: float = 0.0
    freight: float = 0.0

    @classmethod
    def zero(cls) -> StatTuple:
        return cls()

    def __add__(self, other: StatTuple) -> StatTuple:
        if not isinstance(other, StatTuple):
            return NotImplemented
        return StatTuple(
            runs=self.runs + other.runs,
            wagons=self.wagons + other.wagons,
            tonnage=self.tonnage + other.tonnage,
            freight=self.freight + other.freight,
        )

    def to_dict(self) -> dict:
        """Rounded, JSON-ready totals."""
        return {
            "recordCount": self.runs,
            "totalWagons": round(self.wagons, 3),
            "totalTonnage": round(self.tonnage, 3),
            "totalFreight": round(self.freight, 2),
        }


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    for alias in _FIELD_ALIASES.get(name, (name,)):
        if alias in data:
            return data[alias]
    return None


def record_field(record: Any, name: str) -> Any:
    """Read *name* from a dict-like or attribute-style record (None if absent)."""
    if isinstance(record, Mapping):
        return _lookup(record, name)
    return getattr(record, name, None)


def to_number(value: Any) -> float:
    """Coerce a numeric-ish value to float, treating junk as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(num) or math.isinf(num):
        return 0.0
    return num


def _check_dimension(dimension: str) -> None:
    if dimension not in DIMENSIONS:
        raise ValueError(
            f"Unknown dimension '{dimension}'. Use one of: {', '.join(DIMENSIONS)}"
        )


def dimension_key(record: Any, dimension: str) -> str:
    """Return the grouping key of *record*, or UNKNOWN_KEY when blank."""
    _check_dimension(dimension)
    raw = record_field(record, dimension)
    if raw is None:
        return UNKNOWN_KEY
    key = str(raw)
    return key if key.strip() else UNKNOWN_KEY


def accumulate_stats(records: Iterable[Any]) -> StatTuple:
    """Reduce records into a StatTuple.

    ``runs`` counts records; wagons, tonnage and freight are summed after
    coercion, so malformed numeric fields contribute 0 instead of failing.
    """
    runs = 0
    wagons = 0.0
    tonnage = 0.0
    freight = 0.0
    for record in records:
        runs += 1
        wagons += to_number(record_field(record, "wagons"))
        tonnage += to_number(record_field(record, "tonnage"))
        freight += to_number(record_field(record, "freight"))
    return StatTuple(runs=runs, wagons=wagons, tonnage=tonnage, freight=freight)


def group_by_dimension(records: Iterable[Any], dimension: str) -> dict[str, list]:
    """Partition records by commodity or station.

    Groups keep first-seen key order and input order within a group. Every
    record lands in exactly one bucket.
    """
    _check_dimension(dimension)
    groups: dict[str, list] = {}
    for record in records:
        groups.setdefault(dimension_key(record, dimension), []).append(record)
    return groups
