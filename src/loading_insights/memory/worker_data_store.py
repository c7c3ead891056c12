"""In-memory holder for rows pushed by the external worker sync.

The store is an explicit object owned by whoever creates it (the API keeps
one on ``app.state``); nothing here is module-global.
"""
from __future__ import annotations

import copy
import logging
import threading
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


class WorkerDataStore:
    """Latest batch of worker rows, replaced wholesale on every push."""

    def __init__(self) -> None:
        self._rows: list[dict] = []
        self._updated_at: datetime | None = None
        self._lock = threading.Lock()

    def replace(self, rows: list[dict]) -> int:
        """Swap in a new batch and return its size."""
        if not isinstance(rows, list):
            raise TypeError("Worker data must be a list of rows")
        batch = copy.deepcopy(rows)
        with self._lock:
            self._rows = batch
            self._updated_at = datetime.now(timezone.utc)
        logger.info("Worker data replaced (%d rows)", len(batch))
        return len(batch)

    def snapshot(self) -> list[dict]:
        """Copy of the current rows; callers may mutate it freely."""
        with self._lock:
            return copy.deepcopy(self._rows)

    def clear(self) -> None:
        with self._lock:
            self._rows = []
            self._updated_at = None

    @property
    def updated_at(self) -> datetime | None:
        return self._updated_at

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)
