"""Shared fixtures for the HTTP layer tests."""

from unittest.mock import AsyncMock, patch

import pytest

from loading_insights.action.dependencies import create_jwt
from loading_insights.db.connection import get_session


# Override DB dependency with a mock session
def _mock_session_override():
    session = AsyncMock()
    yield session


@pytest.fixture()
def client():
    """TestClient that skips schema creation and never touches a database."""
    with patch("loading_insights.action.api._ensure_tables", new_callable=AsyncMock):
        from loading_insights.action.api import app

        app.dependency_overrides[get_session] = _mock_session_override
        app.state.worker_data.clear()

        from fastapi.testclient import TestClient

        with TestClient(app) as c:
            yield c

        app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    return {"Authorization": f"Bearer {create_jwt('u-1', 'planner')}"}
