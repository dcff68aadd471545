"""Tests for bearer token authentication."""
import json

import pytest
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.responses import Response

from core.auth import authenticate, with_auth
from core.config import Settings
from core.request_context import RequestContext
from core.router import Router
from core.token_codec import issue_token
from services.exceptions import AuthenticationError

SECRET = "auth-test-secret"


@pytest.fixture
def auth_settings() -> Settings:
    return Settings(_env_file=None, jwt_secret=SECRET)


def _ctx(settings: Settings, authorization: str | None = None) -> RequestContext:
    headers = Headers({"authorization": authorization} if authorization else {})
    return RequestContext("GET", "/api/user/info", headers=headers, settings=settings)


async def whoami(ctx: RequestContext) -> Response:
    return JSONResponse({"id": ctx.user.id, "email": ctx.user.email})


class TestAuthenticate:
    """Tests for authenticate."""

    def test__authenticate__valid_token_returns_identity(self, auth_settings: Settings) -> None:
        token = issue_token(5, "a@test.com", SECRET, ttl_seconds=60)

        user = authenticate(_ctx(auth_settings, f"Bearer {token}"))

        assert user.id == 5
        assert user.email == "a@test.com"
        assert user.exp is not None

    def test__authenticate__missing_header_raises(self, auth_settings: Settings) -> None:
        with pytest.raises(AuthenticationError, match="Missing authentication token"):
            authenticate(_ctx(auth_settings))

    def test__authenticate__non_bearer_scheme_raises(self, auth_settings: Settings) -> None:
        with pytest.raises(AuthenticationError, match="Missing authentication token"):
            authenticate(_ctx(auth_settings, "Basic dXNlcjpwYXNz"))

    def test__authenticate__forged_token_raises(self, auth_settings: Settings) -> None:
        token = issue_token(5, "a@test.com", "attacker-secret")
        with pytest.raises(AuthenticationError, match="Invalid authentication token"):
            authenticate(_ctx(auth_settings, f"Bearer {token}"))

    def test__authenticate__expired_token_raises(self, auth_settings: Settings) -> None:
        token = issue_token(5, "a@test.com", SECRET, ttl_seconds=-10)
        with pytest.raises(AuthenticationError, match="Invalid authentication token"):
            authenticate(_ctx(auth_settings, f"Bearer {token}"))


class TestWithAuth:
    """Tests for the with_auth handler wrapper."""

    async def test__with_auth__injects_user_into_handler(self, auth_settings: Settings) -> None:
        token = issue_token(9, "z@test.com", SECRET)

        response = await with_auth(whoami)(_ctx(auth_settings, f"Bearer {token}"))

        assert json.loads(response.body) == {"id": 9, "email": "z@test.com"}

    async def test__with_auth__handler_not_called_without_token(
        self, auth_settings: Settings,
    ) -> None:
        calls: list[RequestContext] = []

        async def handler(ctx: RequestContext) -> Response:
            calls.append(ctx)
            return JSONResponse({})

        router = Router()
        router.get("/api/user/info", with_auth(handler))

        response = await router.dispatch(_ctx(auth_settings))

        assert response.status_code == 401
        assert json.loads(response.body) == {"error": "Missing authentication token"}
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert calls == []
