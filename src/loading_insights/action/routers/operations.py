"""Loading operation entry routes — listing, dropdowns, export and edits."""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from loading_insights.action.dependencies import require_user
from loading_insights.db.connection import get_session
from loading_insights.discovery.report_formatter import operations_to_csv
from loading_insights.memory import operations_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["operations"], dependencies=[Depends(require_user)])


class OperationFields(BaseModel):
    """Writable columns of a loading operation. Omitted fields are left alone."""

    model_config = {"extra": "forbid"}

    p_date: Optional[datetime] = None
    station: Optional[str] = None
    siding: Optional[str] = None
    imported: Optional[str] = None
    commodity: Optional[str] = None
    comm_type: Optional[str] = None
    comm_cg: Optional[str] = None
    demand: Optional[str] = None
    state: Optional[str] = None
    rly: Optional[str] = None
    wagons: Optional[int] = None
    type: Optional[str] = None
    units: Optional[Decimal] = None
    loading_type: Optional[str] = None
    rr_no_from: Optional[int] = None
    rr_no_to: Optional[int] = None
    rr_date: Optional[datetime] = None
    tonnage: Optional[Decimal] = None
    freight: Optional[Decimal] = None
    t_indents: Optional[int] = None
    os_indents: Optional[int] = None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/railway-loading-operations/all")
async def list_operations(
    page: int = 1,
    pageSize: int = 50,
    search: str = "",
    station: str = "",
    commodity: str = "",
    sortBy: str = "pDate",
    sortOrder: str = "desc",
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Paginated, filterable list of loading entries."""
    page = max(page, 1)
    pageSize = max(pageSize, 1)
    rows, total = await operations_store.list_operations(
        session,
        page=page,
        page_size=pageSize,
        search=search,
        station=station,
        commodity=commodity,
        sort_by=sortBy,
        sort_order=sortOrder,
    )
    return {
        "data": [r.to_dict() for r in rows],
        "totalRecords": total,
        "totalPages": -(-total // pageSize),
        "currentPage": page,
        "pageSize": pageSize,
    }


@router.get("/railway-loading-operations/dropdown-options")
async def dropdown_options(session: AsyncSession = Depends(get_session)) -> dict:
    """Distinct values for the entry form dropdowns."""
    return await operations_store.get_dropdown_options(session)


@router.get("/railway-loading-operations/export")
async def export_operations(
    search: str = "",
    station: str = "",
    commodity: str = "",
    sortBy: str = "pDate",
    sortOrder: str = "desc",
    format: str = "csv",
    session: AsyncSession = Depends(get_session),
):
    """Export the filtered entries as CSV."""
    if format != "csv":
        raise HTTPException(status_code=400, detail=f"Unsupported export format '{format}'")
    rows = await operations_store.export_operations(
        session,
        search=search,
        station=station,
        commodity=commodity,
        sort_by=sortBy,
        sort_order=sortOrder,
        limit=settings.export_batch_limit,
    )
    filename = f"railway-operations-{date.today().isoformat()}.csv"
    return Response(
        content=operations_to_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/railway-loading-operations")
async def create_operation(
    body: OperationFields,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Record a single loading entry."""
    operation = await operations_store.create_operation(session, body.model_dump(exclude_unset=True))
    return {"message": "Loading operation created successfully", "operation": operation.to_dict()}


@router.put("/railway-loading-operations/{operation_id}")
async def update_operation(
    operation_id: int,
    body: OperationFields,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Edit fields of an existing loading entry."""
    operation = await operations_store.update_operation(
        session, operation_id, body.model_dump(exclude_unset=True)
    )
    if operation is None:
        raise HTTPException(status_code=404, detail="Railway loading operation not found")
    return {"message": "Loading operation updated successfully", "operation": operation.to_dict()}
