"""Tests for the authenticated user endpoints."""
from httpx import AsyncClient

from core.config import Settings
from core.token_codec import issue_token


async def test__user_info__returns_current_user(
    client: AsyncClient, auth_headers: dict[str, str],
) -> None:
    response = await client.get("/api/user/info", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert set(data) == {"id", "email", "created_at"}
    assert data["email"] == "a@test.com"


async def test__verify__returns_current_user(
    client: AsyncClient, auth_headers: dict[str, str],
) -> None:
    response = await client.post("/api/user/verify", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["email"] == "a@test.com"


async def test__user_info__missing_token_is_401(client: AsyncClient) -> None:
    response = await client.get("/api/user/info")

    assert response.status_code == 401
    assert response.json() == {"error": "Missing authentication token"}


async def test__verify__invalid_token_is_401(client: AsyncClient) -> None:
    response = await client.post(
        "/api/user/verify", headers={"Authorization": "Bearer not.a.token"},
    )

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid authentication token"}


async def test__user_info__expired_token_is_401(client: AsyncClient, settings: Settings) -> None:
    token = issue_token(1, "a@test.com", settings.jwt_secret, ttl_seconds=-1)

    response = await client.get("/api/user/info", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


async def test__user_info__token_for_deleted_user_is_404(
    client: AsyncClient, settings: Settings,
) -> None:
    token = issue_token(424242, "ghost@test.com", settings.jwt_secret)

    response = await client.get("/api/user/info", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}
