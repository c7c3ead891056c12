"""Worker data routes — the external sync worker pushes its latest batch here."""

import logging

from fastapi import APIRouter, Body, HTTPException, Request

from loading_insights.memory.worker_data_store import WorkerDataStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["worker-data"])


def _store(request: Request) -> WorkerDataStore:
    return request.app.state.worker_data


@router.post("/worker-data")
async def push_worker_data(request: Request, payload: dict = Body(...)) -> dict:
    """Replace the held batch with ``payload["data"]``."""
    rows = payload.get("data")
    if not isinstance(rows, list):
        raise HTTPException(status_code=400, detail="Invalid data format: 'data' must be a list")
    count = _store(request).replace(rows)
    return {"success": True, "message": "Data received successfully", "count": count}


@router.get("/worker-data")
async def get_worker_data(request: Request) -> list:
    return _store(request).snapshot()
