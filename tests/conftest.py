"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Iterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from subway_api.main import app


@pytest.fixture(autouse=True)
def _clear_dependency_overrides() -> Iterator[None]:
    """Reset FastAPI dependency overrides between tests."""
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
