"""
Health check endpoint for the dashboard gateway.

GET /health returns HTTP 200 with the service status, whether the access gate
is open (no ACCESS_TOKENS configured) and whether the Redis response cache is
enabled. No authentication is required; intended for Docker HEALTHCHECK and
internal monitoring only.

CHANGELOG:
- 2026-10-19: Report gate and cache state (STORY-015)
- 2026-10-19: Initial creation (STORY-015)

TODO:
- None
"""

from fastapi import APIRouter, Request

from gateway.src.cache.redis_client import cache_enabled

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict[str, str]:
    """Return gateway liveness and configuration state.

    Returns:
        dict: ``status``, ``gate`` (open/closed) and ``cache`` (enabled/disabled).
    """
    gate = request.app.state.gate
    return {
        "status": "ok",
        "gate": "open" if gate.is_open else "closed",
        "cache": "enabled" if cache_enabled() else "disabled",
    }
