"""Tests for health and meta endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_endpoint_returns_200(client: AsyncClient) -> None:
    """Test that health endpoint returns 200 with expected fields."""
    response = await client.get("/health")

    assert response.status_code == 200

    data = response.json()
    assert data["service"] == "Subway Arrivals API"
    assert data["status"] == "healthy"
    assert "version" in data
    assert "timestamp" in data
    assert data["checks"]["feeds"]["configured"] == 8
    assert data["checks"]["feeds"]["timeoutSec"] > 0


@pytest.mark.asyncio
async def test_health_endpoint_includes_environment(client: AsyncClient) -> None:
    """Test that health endpoint includes environment."""
    response = await client.get("/health")
    data = response.json()

    assert data["environment"] in ["development", "staging", "production"]


@pytest.mark.asyncio
async def test_health_endpoint_has_request_id_header(client: AsyncClient) -> None:
    """Test that responses include an X-Request-ID header."""
    response = await client.get("/health")

    assert "X-Request-ID" in response.headers
    assert len(response.headers["X-Request-ID"]) > 0


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient) -> None:
    """Test that a caller-supplied request id is returned unchanged."""
    response = await client.get("/health", headers={"X-Request-ID": "board-42"})

    assert response.headers["X-Request-ID"] == "board-42"


@pytest.mark.asyncio
async def test_attribution_endpoint(client: AsyncClient) -> None:
    """Test that attribution endpoint credits the MTA."""
    response = await client.get("/meta/attribution")

    assert response.status_code == 200

    data = response.json()
    assert "MTA" in data["attribution"]
    assert data["termsUrl"].startswith("https://")
