"""Async HTTP client for the bookmark API."""
import os
from types import TracebackType
from typing import Any

import httpx

from client.errors import ApiError, parse_http_error

DEFAULT_TIMEOUT = 10.0


def get_api_base_url() -> str:
    """Get the API base URL from environment."""
    return os.getenv("BOOKMARK_API_URL", "http://localhost:8000")


class BookmarkApiClient:
    """
    Client for the bookmark API.

    ``register`` and ``login`` remember the returned token; subsequent calls
    send it as a bearer token. Any non-2xx response raises ApiError.

    Usage::

        async with BookmarkApiClient() as client:
            await client.login("a@example.com", "Secret123")
            page = await client.list_bookmarks()
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=base_url or get_api_base_url(),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "BookmarkApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        if self.token is None:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        response = await self._client.request(
            method, path, json=json, params=params, headers=self._headers(),
        )
        if response.is_error:
            raise ApiError(parse_http_error(response))
        return response.json()

    # Auth

    async def register(self, email: str, password: str) -> dict[str, Any]:
        data = await self._request("POST", "/api/auth/register", json={"email": email, "password": password})
        self.token = data["token"]
        return data

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data

    def logout(self) -> None:
        """Forget the token. Tokens are not revoked server-side."""
        self.token = None

    async def verify(self) -> dict[str, Any]:
        return await self._request("POST", "/api/user/verify")

    async def user_info(self) -> dict[str, Any]:
        return await self._request("GET", "/api/user/info")

    # Bookmarks

    async def list_bookmarks(self, page: int = 1, page_size: int = 20) -> dict[str, Any]:
        return await self._request(
            "GET", "/api/bookmarks", params={"page": page, "pageSize": page_size},
        )

    async def add_bookmark(self, title: str, url: str) -> dict[str, Any]:
        return await self._request("POST", "/api/bookmarks", json={"title": title, "url": url})

    async def get_bookmark(self, bookmark_id: int) -> dict[str, Any]:
        return await self._request("GET", f"/api/bookmarks/{bookmark_id}")

    async def update_bookmark(self, bookmark_id: int, title: str, url: str) -> dict[str, Any]:
        return await self._request(
            "PUT", f"/api/bookmarks/{bookmark_id}", json={"title": title, "url": url},
        )

    async def delete_bookmark(self, bookmark_id: int) -> dict[str, Any]:
        return await self._request("DELETE", f"/api/bookmarks/{bookmark_id}")
