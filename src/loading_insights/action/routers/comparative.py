"""Comparative loading routes — weekly and custom-period commodity/station comparisons."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from loading_insights.action.dependencies import parse_day, report_day, require_user
from loading_insights.db.connection import get_session
from loading_insights.discovery.period_comparator import ComparisonResult, compute_comparison
from loading_insights.discovery.report_formatter import (
    comparison_to_csv,
    comparison_to_excel,
    comparison_to_markdown,
)
from loading_insights.discovery.reporting_window import (
    ReportingWindow,
    resolve_reporting_window,
    window_between,
)
from loading_insights.memory import operations_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["comparative"], dependencies=[Depends(require_user)])

_DOWNLOAD_FORMATS = ("csv", "excel", "markdown")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _fetch_periods(session: AsyncSession, window: ReportingWindow) -> tuple[list, list]:
    current = await operations_store.get_records_between(
        session, window.current.start, window.current.end
    )
    previous = await operations_store.get_records_between(
        session, window.previous.start, window.previous.end
    )
    logger.info(
        "Current period %s: %d records; compare period %s: %d records",
        window.current.label(), len(current), window.previous.label(), len(previous),
    )
    return current, previous


def _payload(window: ReportingWindow, result: ComparisonResult) -> dict:
    return {
        "periods": window.labels(),
        "windows": {
            "current": window.current.to_dict(),
            "previous": window.previous.to_dict(),
        },
        "dimension": result.dimension,
        "data": [row.to_dict() for row in result.rows],
        "totals": result.totals.to_dict(),
    }


def _custom_window(
    current_from: Optional[str],
    current_to: Optional[str],
    compare_from: Optional[str],
    compare_to: Optional[str],
) -> ReportingWindow:
    return ReportingWindow(
        current=window_between(
            parse_day(current_from, "currentFrom"), parse_day(current_to, "currentTo")
        ),
        previous=window_between(
            parse_day(compare_from, "compareFrom"), parse_day(compare_to, "compareTo")
        ),
    )


async def _weekly(session: AsyncSession, today: Optional[str], dimension: str) -> dict:
    window = resolve_reporting_window(report_day(today))
    current, previous = await _fetch_periods(session, window)
    result = compute_comparison(
        current, previous, window.current.days, window.previous.days, dimension
    )
    return _payload(window, result)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/comparative-loading")
async def comparative_loading(
    today: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Commodity-wise loading for the weekly window vs the same dates last year."""
    return await _weekly(session, today, "commodity")


@router.get("/station-comparative-loading")
async def station_comparative_loading(
    today: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Station-wise loading for the weekly window vs the same dates last year."""
    return await _weekly(session, today, "station")


@router.get("/daily-reports")
async def daily_reports(
    currentFrom: Optional[str] = None,
    currentTo: Optional[str] = None,
    compareFrom: Optional[str] = None,
    compareTo: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Commodity and station comparison between two caller-chosen periods."""
    window = _custom_window(currentFrom, currentTo, compareFrom, compareTo)
    current, previous = await _fetch_periods(session, window)

    commodity = compute_comparison(
        current, previous, window.current.days, window.previous.days, "commodity"
    )
    station = compute_comparison(
        current, previous, window.current.days, window.previous.days, "station"
    )
    return {
        "periods": window.labels(),
        "commodityData": _payload(window, commodity),
        "stationData": _payload(window, station),
        "summary": {
            "currentPeriod": window.current.to_dict(),
            "comparePeriod": window.previous.to_dict(),
        },
    }


@router.get("/daily-reports/download")
async def download_daily_report(
    currentFrom: Optional[str] = None,
    currentTo: Optional[str] = None,
    compareFrom: Optional[str] = None,
    compareTo: Optional[str] = None,
    format: str = "csv",
    session: AsyncSession = Depends(get_session),
):
    """Download the custom-period comparison as CSV, Excel or markdown."""
    if format not in _DOWNLOAD_FORMATS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid format '{format}'. Use one of: {', '.join(_DOWNLOAD_FORMATS)}",
        )
    window = _custom_window(currentFrom, currentTo, compareFrom, compareTo)
    current, previous = await _fetch_periods(session, window)

    sections = [
        (
            "Commodity wise Comparative Loading",
            "Commodity",
            compute_comparison(current, previous, window.current.days, window.previous.days, "commodity"),
        ),
        (
            "Station wise Comparative Loading",
            "Station",
            compute_comparison(current, previous, window.current.days, window.previous.days, "station"),
        ),
    ]
    stem = (
        f"daily-report-{window.current.start.strftime('%d-%m-%Y')}"
        f"-{window.current.end.strftime('%d-%m-%Y')}"
    )

    if format == "excel":
        return Response(
            content=comparison_to_excel(sections),
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f'attachment; filename="{stem}.xlsx"'},
        )
    if format == "markdown":
        body = "\n".join(
            comparison_to_markdown(result, title, label, window.labels())
            for title, label, result in sections
        )
        return Response(
            content=body,
            media_type="text/markdown",
            headers={"Content-Disposition": f'attachment; filename="{stem}.md"'},
        )
    return Response(
        content=comparison_to_csv(sections),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{stem}.csv"'},
    )
