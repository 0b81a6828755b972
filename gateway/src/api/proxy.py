"""
Upstream proxy endpoints under /api.

Each route forwards the caller's bearer token (and X-API-Key, when present)
to the upstream SMA reader API and relays the JSON body with the upstream
status code, so a 401 from upstream reaches the browser unchanged. Network
failures and non-JSON bodies become ``500 {"error": "Failed to fetch ..."}``.

Successful (200) responses are cached in Redis for CACHE_TTL_S seconds when
REDIS_URL is configured; cache failures fall through to the upstream call.

CHANGELOG:
- 2026-10-19: Add /api/yearly-yield (STORY-016)
- 2026-10-19: Cache 200 responses in Redis (STORY-014)
- 2026-10-19: Initial creation (STORY-016)

TODO:
- None
"""

import logging

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from dashboard.src.upstream import CURRENT_AND_MAX_PATH, CURRENT_PATH, TODAY_PATH, YEARLY_PATH
from gateway.src.api.deps import AccessToken, HttpClient, config_float, forwarded_api_key
from gateway.src.cache.redis_client import proxy_cache_key, read_cached, write_cached

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["proxy"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _proxy(
    request: Request,
    path: str,
    token: str,
    http_client: httpx.AsyncClient,
    resource: str,
) -> JSONResponse:
    """Forward one GET to upstream and relay its JSON response.

    Args:
        request: The incoming FastAPI request.
        path: Upstream path, identical to the gateway path.
        token: The caller's bearer token.
        http_client: Pooled upstream client.
        resource: Human-readable resource name for the error body.

    Returns:
        JSONResponse: Upstream body and status, or a 500 error body.
    """
    api_key = forwarded_api_key(request)
    cache_key = proxy_cache_key(path, f"{token}|{api_key}")

    cached = await read_cached(cache_key)
    if cached is not None:
        return JSONResponse(cached)

    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    if api_key:
        headers["X-API-Key"] = f"Bearer {api_key}"

    base_url = request.app.state.config["UPSTREAM_BASE_URL"]
    try:
        response = await http_client.get(f"{base_url}{path}", headers=headers)
        payload = response.json()
    except (httpx.HTTPError, ValueError):
        logger.warning("Proxying %s failed", path, exc_info=True)
        return JSONResponse({"error": f"Failed to fetch {resource}"}, status_code=500)

    if response.status_code == 200:
        ttl_s = int(config_float(request, "CACHE_TTL_S", 5.0))
        await write_cached(cache_key, payload, ttl_s)

    return JSONResponse(payload, status_code=response.status_code)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/current")
async def current(request: Request, token: AccessToken, http_client: HttpClient) -> JSONResponse:
    """Current inverter power and total yield."""
    return await _proxy(request, CURRENT_PATH, token, http_client, "current data")


@router.get("/current-and-max")
async def current_and_max(
    request: Request, token: AccessToken, http_client: HttpClient
) -> JSONResponse:
    """Current reading together with today's maximum."""
    return await _proxy(
        request, CURRENT_AND_MAX_PATH, token, http_client, "current and max data"
    )


@router.get("/today")
async def today(request: Request, token: AccessToken, http_client: HttpClient) -> JSONResponse:
    """Today's power samples."""
    return await _proxy(request, TODAY_PATH, token, http_client, "today's data")


@router.get("/yearly-yield")
async def yearly_yield(
    request: Request, token: AccessToken, http_client: HttpClient
) -> JSONResponse:
    """Cumulative yield per year."""
    return await _proxy(request, YEARLY_PATH, token, http_client, "yearly yield data")
