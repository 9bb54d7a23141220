"""
Unit tests for health endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(async_client: AsyncClient) -> None:
    """Test basic health check endpoint."""
    response = await async_client.get("/health")
    assert response.status_code == 200
    assert response.text == "OK"


@pytest.mark.asyncio
async def test_readiness_check(async_client: AsyncClient) -> None:
    """Test readiness check endpoint."""
    response = await async_client.get("/health/ready")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "ready"
    assert set(data["checks"]) == {"app", "llm", "atlassian", "email"}
    assert data["checks"]["app"] is True
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_liveness_check(async_client: AsyncClient) -> None:
    """Test liveness check endpoint."""
    response = await async_client.get("/health/live")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "alive"


@pytest.mark.asyncio
async def test_unknown_route_is_404(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/v1/health")
    assert response.status_code == 404
