"""Tests for the health check endpoint."""
from httpx import AsyncClient


async def test_health_endpoint_returns_200(client: AsyncClient) -> None:
    """Test that the health endpoint returns 200 OK."""
    response = await client.get("/health")
    assert response.status_code == 200


async def test_health_endpoint_returns_healthy_status(client: AsyncClient) -> None:
    """Test that the health endpoint reports a reachable database."""
    response = await client.get("/health")
    assert response.json() == {"status": "healthy", "database": "healthy"}


async def test_health_endpoint_needs_no_auth_and_has_security_headers(client: AsyncClient) -> None:
    """Health is public but still passes through the global middlewares."""
    response = await client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Response-Time" in response.headers
