"""API test fixtures — httpx.AsyncClient with an in-memory bar repository.

The bar repository dependency is overridden so endpoint tests never touch
a database; each test seeds its own InMemoryBarRepository.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from sst.api.deps import get_bar_repository
from sst.data.repository import InMemoryBarRepository
from sst.main import app


@pytest.fixture
def repo() -> InMemoryBarRepository:
    return InMemoryBarRepository()


@pytest_asyncio.fixture
async def client(repo: InMemoryBarRepository) -> AsyncClient:
    """Provide an httpx.AsyncClient wired to the app with the repo override."""
    app.dependency_overrides[get_bar_repository] = lambda: repo

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def bare_client() -> AsyncClient:
    """Client with no dependency overrides — for endpoints without storage."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
