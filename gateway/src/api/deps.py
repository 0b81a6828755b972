"""
FastAPI dependency injection providers.

Provides the shared upstream HTTP client, the access gate dependency and
typed accessors for the string config loaded at startup, for use with
FastAPI's Depends() mechanism.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-013)
"""

import logging
from typing import Annotated

import httpx
from fastapi import Depends, Request

logger = logging.getLogger(__name__)


async def get_access_token(request: Request) -> str:
    """Validate the caller via the AccessGate on app.state.

    Args:
        request: The incoming FastAPI request.

    Returns:
        str: The caller's bearer token, forwarded upstream.
    """
    return await request.app.state.gate.verify(request)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Return the pooled upstream client created in the app lifespan."""
    return request.app.state.http_client


# Usage in route handlers:
#   async def my_route(token: AccessToken, http_client: HttpClient):
#       response = await http_client.get(...)
AccessToken = Annotated[str, Depends(get_access_token)]
HttpClient = Annotated[httpx.AsyncClient, Depends(get_http_client)]


def config_float(request: Request, key: str, default: float) -> float:
    """Read a numeric config value from app.state, falling back on bad input."""
    raw = request.app.state.config.get(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s value %r, using default %s", key, raw, default)
        return default


def forwarded_api_key(request: Request) -> str:
    """Extract the API secret from an incoming ``X-API-Key: Bearer <key>`` header."""
    raw = request.headers.get("X-API-Key", "")
    return raw.removeprefix("Bearer ").strip()
