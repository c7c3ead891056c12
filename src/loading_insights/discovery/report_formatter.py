"""Report formatter — turns comparison results into tables, CSV, Excel and markdown.

Pure functions that produce renderer input. Numbers in markdown use the
Indian numbering system (1,23,456); CSV and Excel keep raw values.
"""

from __future__ import annotations

import csv
from datetime import date, datetime
from io import BytesIO, StringIO
from typing import Any, Iterable

import pandas as pd

from loading_insights.discovery.period_comparator import ComparisonResult, PeriodStats

PERIOD_COLUMNS = ["Rks", "Avg/Day", "Wagon", "MT", "Freight"]
# Fixed decimals per markdown cell after the key; None keeps whole numbers bare
_PERIOD_DIGITS = [0, 2, None, 3, 2]
_MARKDOWN_DIGITS = _PERIOD_DIGITS + _PERIOD_DIGITS + [3]

# Export header -> record attribute
OPERATION_EXPORT_COLUMNS: list[tuple[str, str]] = [
    ("Date", "p_date"),
    ("Station", "station"),
    ("Siding", "siding"),
    ("Commodity", "commodity"),
    ("Comm Type", "comm_type"),
    ("Comm CG", "comm_cg"),
    ("Demand", "demand"),
    ("State", "state"),
    ("Railway", "rly"),
    ("Wagons", "wagons"),
    ("Type", "type"),
    ("Units", "units"),
    ("Loading Type", "loading_type"),
    ("RR No From", "rr_no_from"),
    ("RR No To", "rr_no_to"),
    ("RR Date", "rr_date"),
    ("Tonnage", "tonnage"),
    ("Freight", "freight"),
]
_NUMERIC_EXPORT = {"wagons", "units", "tonnage", "freight"}


# ---------------------------------------------------------------------------
# Indian locale number formatting
# ---------------------------------------------------------------------------


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs: list[str] = []
    while head:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    return ",".join(pairs + [tail])


def format_indian_number(value: Any, digits: int | None = None) -> str:
    """Format a number with lakh/crore grouping (12,34,567).

    *digits* fixes the decimal places (MT figures use 3). Without it whole
    numbers stay bare and anything else shows 2 places.
    """
    number = float(value)
    if digits is None:
        digits = 0 if number.is_integer() else 2
    text = f"{abs(number):.{digits}f}"
    whole, _, frac = text.partition(".")
    sign = "-" if number < 0 and float(text) != 0 else ""
    grouped = _group_indian(whole)
    return f"{sign}{grouped}.{frac}" if frac else f"{sign}{grouped}"


# Percent changes inside this band read as flat
_FLAT_BAND = 0.5


def _trend_arrow(change_pct: float) -> str:
    if abs(change_pct) <= _FLAT_BAND:
        return "→"
    return "↑" if change_pct > 0 else "↓"


def _format_date(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.strftime("%d-%m-%Y")
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# Comparison tables
# ---------------------------------------------------------------------------


def _period_cells(stats: PeriodStats) -> list:
    return [stats.runs, stats.avg_per_day, stats.wagons, stats.tonnage, stats.freight]


def comparison_table(result: ComparisonResult, dimension_label: str) -> list[list]:
    """Header plus one row per key and a closing TOTAL row."""
    header = (
        [dimension_label]
        + [f"Current {c}" for c in PERIOD_COLUMNS]
        + [f"Compare {c}" for c in PERIOD_COLUMNS]
        + ["Var Units", "Var %"]
    )
    table: list[list] = [header]
    for row in result.rows:
        table.append(
            [row.key]
            + _period_cells(row.current)
            + _period_cells(row.previous)
            + [row.change_in_units, row.change_in_percent]
        )
    totals = result.totals
    table.append(
        ["TOTAL"]
        + _period_cells(totals.current)
        + _period_cells(totals.previous)
        + [totals.change_in_units, totals.change_in_percent]
    )
    return table


def comparison_to_csv(sections: Iterable[tuple[str, str, ComparisonResult]]) -> str:
    """Render (title, dimension label, result) sections into one CSV document."""
    output = StringIO()
    writer = csv.writer(output)
    first = True
    for title, label, result in sections:
        if not first:
            writer.writerow([])
        first = False
        writer.writerow([title])
        writer.writerows(comparison_table(result, label))
    return output.getvalue()


def comparison_to_excel(sections: Iterable[tuple[str, str, ComparisonResult]]) -> bytes:
    """Render sections into an .xlsx workbook, one sheet per section."""
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for title, label, result in sections:
            table = comparison_table(result, label)
            df = pd.DataFrame(table[1:], columns=table[0])
            # Excel caps sheet names at 31 characters
            df.to_excel(writer, sheet_name=title[:31], index=False)
    return buffer.getvalue()


def comparison_to_markdown(
    result: ComparisonResult,
    title: str,
    dimension_label: str,
    periods: dict | None = None,
) -> str:
    """Markdown table of a comparison with Indian-formatted figures."""
    lines = [f"## {title}", ""]
    if periods:
        lines.append(f"Current: {periods.get('current', '')} | Compare: {periods.get('previous', '')}")
        lines.append("")

    table = comparison_table(result, dimension_label)
    lines.append("| " + " | ".join(table[0]) + " |")
    lines.append("| " + " | ".join("---" for _ in table[0]) + " |")
    for cells in table[1:]:
        pct = cells[-1]
        formatted = [str(cells[0])]
        formatted += [
            format_indian_number(c, d) for c, d in zip(cells[1:-1], _MARKDOWN_DIGITS)
        ]
        formatted.append(f"{pct:.2f}% {_trend_arrow(pct)}")
        lines.append("| " + " | ".join(formatted) + " |")
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Raw record export
# ---------------------------------------------------------------------------


def operations_to_csv(rows: Iterable[Any]) -> str:
    """CSV export of raw loading records (ORM rows or dicts)."""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow([header for header, _ in OPERATION_EXPORT_COLUMNS])
    for row in rows:
        cells = []
        for _, attr in OPERATION_EXPORT_COLUMNS:
            value = row.get(attr) if isinstance(row, dict) else getattr(row, attr, None)
            if attr in ("p_date", "rr_date"):
                cells.append(_format_date(value))
            elif attr in _NUMERIC_EXPORT:
                cells.append(value if value is not None else 0)
            else:
                cells.append("" if value is None else value)
        writer.writerow(cells)
    return output.getvalue()
