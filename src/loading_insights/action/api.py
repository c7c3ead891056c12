"""FastAPI application for the loading reports."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from loading_insights.db.connection import engine
from loading_insights.db.models import Base
from loading_insights.memory.worker_data_store import WorkerDataStore

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


async def _ensure_tables():
    """Create missing tables. Existing tables are left untouched."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")
    except Exception:
        logger.exception("Failed to ensure database schema")


@asynccontextmanager
async def _lifespan(app: FastAPI):
    await _ensure_tables()
    yield


app = FastAPI(title="Loading Insights API", version=VERSION, lifespan=_lifespan)
app.state.worker_data = WorkerDataStore()

# ---------------------------------------------------------------------------
# Include modular routers
# ---------------------------------------------------------------------------
from loading_insights.action.routers.comparative import router as comparative_router  # noqa: E402
from loading_insights.action.routers.operations import router as operations_router  # noqa: E402
from loading_insights.action.routers.reports import router as reports_router  # noqa: E402
from loading_insights.action.routers.worker_data import router as worker_data_router  # noqa: E402

app.include_router(comparative_router)
app.include_router(reports_router)
app.include_router(operations_router)
app.include_router(worker_data_router)


@app.exception_handler(Exception)
async def _global_error_handler(request: Request, exc: Exception):
    """Catch-all: ensure every unhandled error returns JSON, not raw HTML."""
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={
            "detail": f"Server error: {exc}",
            "error": str(exc),
            "status": "failed",
        },
    )


# CORS: lock down in production via CORS_ORIGINS env var (comma-separated).
_cors_origins = os.environ.get("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "version": VERSION}
