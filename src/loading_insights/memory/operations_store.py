"""Queries and writes for railway loading operations."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from loading_insights.db.models import LoadingOperation
from loading_insights.discovery.loading_stats import OperationRecord

logger = logging.getLogger(__name__)

_SEARCH_COLUMNS = ("station", "commodity", "siding", "type")
_DATE_FIELDS = ("p_date", "rr_date")
_WRITABLE_FIELDS = {
    c.name for c in LoadingOperation.__table__.columns
    if c.name not in ("id", "created_at", "updated_at")
}
# API sort keys (camelCase from the UI) -> column
_SORT_ALIASES = {
    "pDate": "p_date",
    "commType": "comm_type",
    "commCg": "comm_cg",
    "loadingType": "loading_type",
    "rrDate": "rr_date",
}

DROPDOWN_FIELDS = {
    "stations": "station",
    "commodities": "commodity",
    "commTypes": "comm_type",
    "commCgs": "comm_cg",
    "states": "state",
    "railways": "rly",
    "wagonTypes": "type",
    "loadingTypes": "loading_type",
}


async def get_records_between(
    session: AsyncSession,
    start: datetime,
    end: datetime,
) -> list[OperationRecord]:
    """Fetch records whose p_date falls in [start, end]."""
    try:
        result = await session.execute(
            select(LoadingOperation).where(
                LoadingOperation.p_date >= start,
                LoadingOperation.p_date <= end,
            )
        )
        return [row.to_record() for row in result.scalars().all()]
    except Exception:
        logger.exception("Failed to fetch loading records between %s and %s", start, end)
        await session.rollback()
        return []


async def get_all_records(
    session: AsyncSession,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[OperationRecord]:
    """Fetch every record, optionally bounded by p_date."""
    q = select(LoadingOperation)
    if start is not None:
        q = q.where(LoadingOperation.p_date >= start)
    if end is not None:
        q = q.where(LoadingOperation.p_date <= end)
    try:
        result = await session.execute(q)
        return [row.to_record() for row in result.scalars().all()]
    except Exception:
        logger.exception("Failed to fetch loading records")
        await session.rollback()
        return []


def _filtered(q, search: str = "", station: str = "", commodity: str = ""):
    if search:
        pattern = f"%{search}%"
        q = q.where(or_(*(getattr(LoadingOperation, c).ilike(pattern) for c in _SEARCH_COLUMNS)))
    if station and station != "all":
        q = q.where(LoadingOperation.station == station)
    if commodity and commodity != "all":
        q = q.where(LoadingOperation.commodity == commodity)
    return q


def _order_column(sort_by: str, sort_order: str):
    name = _SORT_ALIASES.get(sort_by, sort_by)
    if name not in LoadingOperation.__table__.columns:
        name = "p_date"
    column = getattr(LoadingOperation, name)
    return column.asc() if sort_order == "asc" else column.desc()


async def list_operations(
    session: AsyncSession,
    page: int = 1,
    page_size: int = 50,
    search: str = "",
    station: str = "",
    commodity: str = "",
    sort_by: str = "p_date",
    sort_order: str = "desc",
) -> tuple[list[LoadingOperation], int]:
    """Return one page of operations and the total matching count."""
    page = max(page, 1)
    page_size = max(page_size, 1)
    try:
        count_q = _filtered(select(func.count()).select_from(LoadingOperation), search, station, commodity)
        total = (await session.execute(count_q)).scalar_one()

        q = _filtered(select(LoadingOperation), search, station, commodity)
        q = q.order_by(_order_column(sort_by, sort_order))
        q = q.limit(page_size).offset((page - 1) * page_size)
        result = await session.execute(q)
        return list(result.scalars().all()), int(total or 0)
    except Exception:
        logger.exception("Failed to list loading operations")
        await session.rollback()
        return [], 0


async def export_operations(
    session: AsyncSession,
    search: str = "",
    station: str = "",
    commodity: str = "",
    sort_by: str = "p_date",
    sort_order: str = "desc",
    limit: int | None = None,
) -> list[LoadingOperation]:
    """All matching operations for export, in the requested order."""
    q = _filtered(select(LoadingOperation), search, station, commodity)
    q = q.order_by(_order_column(sort_by, sort_order))
    if limit is not None:
        q = q.limit(limit)
    try:
        result = await session.execute(q)
        return list(result.scalars().all())
    except Exception:
        logger.exception("Failed to export loading operations")
        await session.rollback()
        return []


async def get_dropdown_options(session: AsyncSession) -> dict[str, list[str]]:
    """Distinct, sorted, non-blank values for the entry form dropdowns."""
    options: dict[str, list[str]] = {}
    for key, column_name in DROPDOWN_FIELDS.items():
        column = getattr(LoadingOperation, column_name)
        try:
            result = await session.execute(select(column).distinct().where(column.isnot(None)))
            options[key] = sorted(v for v in result.scalars().all() if v)
        except Exception:
            logger.exception("Failed to fetch dropdown values for %s", column_name)
            await session.rollback()
            options[key] = []
    return options


def _clean_fields(fields: dict[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - _WRITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")
    cleaned = dict(fields)
    for name in _DATE_FIELDS:
        value = cleaned.get(name)
        if isinstance(value, str):
            cleaned[name] = datetime.fromisoformat(value) if value.strip() else None
    return cleaned


async def create_operation(session: AsyncSession, fields: dict[str, Any]) -> LoadingOperation:
    """Insert one operation row."""
    operation = LoadingOperation(**_clean_fields(fields))
    try:
        session.add(operation)
        await session.commit()
        await session.refresh(operation)
        return operation
    except Exception:
        logger.exception("Failed to create loading operation")
        await session.rollback()
        raise


async def update_operation(
    session: AsyncSession,
    operation_id: int,
    fields: dict[str, Any],
) -> LoadingOperation | None:
    """Apply *fields* to an operation; None when it does not exist."""
    cleaned = _clean_fields(fields)
    try:
        result = await session.execute(
            select(LoadingOperation).where(LoadingOperation.id == operation_id)
        )
        operation = result.scalar_one_or_none()
        if operation is None:
            return None
        for name, value in cleaned.items():
            setattr(operation, name, value)
        await session.commit()
        await session.refresh(operation)
        return operation
    except Exception:
        logger.exception("Failed to update loading operation %s", operation_id)
        await session.rollback()
        raise
