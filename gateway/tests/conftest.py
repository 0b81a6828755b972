"""
Shared test fixtures for gateway tests.

Provides a configured TestClient whose pooled upstream client is backed by
an httpx.MockTransport, so no real SMA reader API is contacted. Environment
variables are set to test values and REDIS_URL is removed, so the response
cache is disabled unless a test enables it explicitly.

CHANGELOG:
- 2026-10-19: Add scripted upstream transport (STORY-016)
- 2026-10-19: Initial creation (STORY-013)
"""

from collections.abc import Generator
from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

UPSTREAM_BASE_URL = "https://sma.example.com"
ACCESS_SECRET = "dash-secret"


@pytest.fixture(autouse=True)
def _set_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set required environment variables and disable the Redis cache."""
    monkeypatch.setenv("UPSTREAM_BASE_URL", UPSTREAM_BASE_URL)
    monkeypatch.setenv("ACCESS_TOKENS", ACCESS_SECRET)
    monkeypatch.setenv("DISPLAY_TIMEZONE", "UTC")
    for var in ("REDIS_URL", "CACHE_TTL_S", "UPSTREAM_TIMEOUT_S", "GAUGE_MAX_W"):
        monkeypatch.delenv(var, raising=False)


class ScriptedUpstream:
    """MockTransport handler answering from a path -> response map.

    Values are either an ``httpx.Response`` or an exception to raise.
    Unknown paths answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.routes.get(request.url.path)
        if outcome is None:
            return httpx.Response(404, json={"success": False, "error": "not found"})
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture()
def upstream() -> ScriptedUpstream:
    """The scripted upstream behind the gateway's pooled client."""
    return ScriptedUpstream()


@pytest.fixture()
def client(upstream: ScriptedUpstream) -> Generator[TestClient, None, None]:
    """Create a FastAPI TestClient for integration testing.

    The httpx.AsyncClient opened in the lifespan is built on a MockTransport
    routed to *upstream*.

    Yields:
        TestClient: Configured test client for the gateway app.
    """
    from gateway.src.api.main import app

    real_async_client = httpx.AsyncClient

    def _mock_client(**kwargs: Any) -> httpx.AsyncClient:
        return real_async_client(transport=httpx.MockTransport(upstream), **kwargs)

    with patch("gateway.src.api.main.httpx.AsyncClient", side_effect=_mock_client):
        test_client = TestClient(app)
        test_client.__enter__()
    try:
        yield test_client
    finally:
        test_client.__exit__(None, None, None)


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    """Authorization header carrying the accepted access secret."""
    return {"Authorization": f"Bearer {ACCESS_SECRET}"}


@pytest.fixture()
def mock_redis() -> AsyncMock:
    """Create a mock async Redis client.

    Returns:
        AsyncMock: A mock that behaves like a redis.asyncio.Redis client.
    """
    redis_client = AsyncMock()
    redis_client.get = AsyncMock(return_value=None)
    redis_client.set = AsyncMock()
    redis_client.aclose = AsyncMock()
    return redis_client
