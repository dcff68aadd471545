"""
Security test fixtures.

These fixtures enable testing security scenarios like IDOR (Insecure Direct
Object Reference) by registering two users through the API and creating a
bookmark owned by the first.
"""
from collections.abc import Awaitable, Callable

import pytest
from httpx import AsyncClient


@pytest.fixture
async def user_a_headers(register_user: Callable[..., Awaitable[dict]]) -> dict[str, str]:
    """Authorization headers for the first test user (User A)."""
    data = await register_user("user-a@test.com")
    return {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture
async def user_b_headers(register_user: Callable[..., Awaitable[dict]]) -> dict[str, str]:
    """Authorization headers for a second test user (User B)."""
    data = await register_user("user-b@test.com")
    return {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture
async def user_a_bookmark(client: AsyncClient, user_a_headers: dict[str, str]) -> dict:
    """Create a bookmark belonging to User A."""
    response = await client.post(
        "/api/bookmarks",
        json={"title": "User A's Private Bookmark", "url": "https://user-a-bookmark.example.com/"},
        headers=user_a_headers,
    )
    assert response.status_code == 201
    return response.json()
