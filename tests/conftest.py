"""
Pytest configuration.

Forces AnyIO onto the asyncio backend and provides token/client helpers
for the HTTP tests.
"""
from datetime import timedelta

import httpx
import pytest
from httpx import ASGITransport

from madrassa.auth.jwt import create_access_token


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def token_for():
    """Build a signed bearer token for a role (or any raw role claim)."""

    def _make(role, username: str = "tester", expires_delta: timedelta | None = None) -> str:
        claims = {"sub": username}
        if role is not None:
            claims["role"] = getattr(role, "value", role)
        return create_access_token(claims, expires_delta=expires_delta)

    return _make


@pytest.fixture
def auth_headers(token_for):
    def _headers(role, **kwargs) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(role, **kwargs)}"}

    return _headers


@pytest.fixture
def make_client():
    def _client(app) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _client
