"""Shared test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from cashflow.main import app
from cashflow.services.data_source import SnapshotDataSource
from factories import sample_snapshot


@pytest.fixture
async def client():
    """Async test client for the FastAPI app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def snapshot():
    return sample_snapshot()


@pytest.fixture
def source(snapshot):
    return SnapshotDataSource(snapshot)
