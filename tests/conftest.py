"""Root conftest: shared fixtures for all backend tests.

Provides:
- A mocked AsyncSession (no database is needed for any test)
- A mocked droplet: an httpx client whose responses come from a swappable handler
- API client with dependency overrides
"""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

# ─────────────────────────────────────────────────────────────────────────────
# Database
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def mock_db() -> AsyncMock:
    """AsyncSession stand-in; tests set ``execute`` results per case."""
    db = AsyncMock()
    db.add = MagicMock()
    return db


# ─────────────────────────────────────────────────────────────────────────────
# Droplet (worker health, control, usage)
# ─────────────────────────────────────────────────────────────────────────────


class DropletStub:
    """Routes every outgoing request to ``handler``; records what was sent."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda _req: httpx.Response(
            200, json={}
        )

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.handler(request)
        if hasattr(result, "__await__"):
            result = await result
        return result


@pytest.fixture
def droplet() -> DropletStub:
    return DropletStub()


@pytest.fixture
async def droplet_client(droplet: DropletStub):
    async with httpx.AsyncClient(transport=httpx.MockTransport(droplet)) as client:
        yield client


# ─────────────────────────────────────────────────────────────────────────────
# API Client
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
async def api_client(mock_db: AsyncMock, droplet_client: httpx.AsyncClient):
    """HTTP client against the app with the session and droplet client replaced.

    Overrides: get_db, get_http_client
    """
    from opsboard.core.database import get_db
    from opsboard.main import app
    from opsboard.services.http_client import get_http_client

    async def override_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_http_client] = lambda: droplet_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
