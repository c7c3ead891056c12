"""Reports routes — grouped totals, shares of total and year-on-year summaries."""

import logging
from datetime import datetime, time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from loading_insights.action.dependencies import parse_day, require_user
from loading_insights.db.connection import get_session
from loading_insights.discovery.loading_stats import DIMENSIONS
from loading_insights.discovery.share_of_total import dimension_summary, share_breakdown
from loading_insights.discovery.yearly_summary import (
    yearly_dimension_totals,
    yearly_share_breakdown,
    yearly_totals,
)
from loading_insights.memory import operations_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"], dependencies=[Depends(require_user)])


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/reports/railway-operations")
async def railway_operations_report(
    groupBy: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
) -> list[dict]:
    """All-time totals per commodity or station."""
    if groupBy not in DIMENSIONS:
        raise HTTPException(
            status_code=400,
            detail="Invalid groupBy parameter. Use 'commodity' or 'station'",
        )
    records = await operations_store.get_all_records(session)
    return dimension_summary(records, groupBy)


@router.get("/reports/railway-operations/combined")
async def combined_report(session: AsyncSession = Depends(get_session)) -> dict:
    """Commodity shares of the grand total with station shares per commodity."""
    records = await operations_store.get_all_records(session)
    return share_breakdown(records, digits=settings.share_decimals).to_dict()


@router.get("/reports/railway-operations/yearly")
async def yearly_report(
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Share breakdown for the latest two financial years, optionally date-bounded."""
    start = datetime.combine(parse_day(startDate, "startDate"), time.min) if startDate else None
    end = datetime.combine(parse_day(endDate, "endDate"), time.max) if endDate else None
    if start and end and start > end:
        raise HTTPException(status_code=400, detail="startDate must not be after endDate")

    records = await operations_store.get_all_records(session, start, end)
    years = yearly_share_breakdown(records, basis="financial", limit=2, digits=settings.share_decimals)
    return {
        "years": [{"year": y["year"], **y["totals"]} for y in years],
        "commodityData": [{"year": y["year"], "data": y["data"]} for y in years],
    }


@router.get("/reports/yearly-comparison")
async def yearly_comparison(session: AsyncSession = Depends(get_session)) -> list[dict]:
    """Calendar-year totals, newest first."""
    records = await operations_store.get_all_records(session)
    return yearly_totals(records, basis="calendar")


@router.get("/yearly-loading-commodities")
async def yearly_loading_commodities(session: AsyncSession = Depends(get_session)) -> list[dict]:
    """Chart rows: tonnage, wagons and freight per year and commodity."""
    records = await operations_store.get_all_records(session)
    return yearly_dimension_totals(records, "commodity")


@router.get("/yearly-loading-stations")
async def yearly_loading_stations(session: AsyncSession = Depends(get_session)) -> list[dict]:
    """Chart rows: tonnage, wagons and freight per year and station."""
    records = await operations_store.get_all_records(session)
    return yearly_dimension_totals(records, "station")
