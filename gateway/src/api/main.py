"""
FastAPI application entry point for the solar meter dashboard gateway.

Gates the dashboard API behind a shared-secret bearer token and proxies the
upstream SMA reader API. Environment variables are loaded and validated at
startup; ACCESS_TOKENS are parsed into an AccessGate stored on app.state for
route handlers, and a pooled httpx.AsyncClient is opened for upstream calls.

CHANGELOG:
- 2026-10-19: Register dashboard router (STORY-017)
- 2026-10-19: Register proxy and auth-check routers (STORY-016)
- 2026-10-19: Initial creation (STORY-013)
"""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashboard.src.config import resolve_timezone
from gateway.src.api.access import router as access_router
from gateway.src.api.dashboard import router as dashboard_router
from gateway.src.api.health import router as health_router
from gateway.src.api.proxy import router as proxy_router
from gateway.src.auth.bearer import AccessGate, parse_access_tokens

logger = logging.getLogger(__name__)


def _load_env_config() -> dict[str, str]:
    """Load and validate environment variables at startup.

    Returns:
        dict: Mapping of config key to value.

    Raises:
        RuntimeError: If a required variable is missing or a value is invalid.
    """
    required = ["UPSTREAM_BASE_URL"]
    config: dict[str, str] = {}
    missing: list[str] = []

    for key in required:
        value = os.environ.get(key)
        if not value:
            missing.append(key)
        else:
            config[key] = value

    if missing:
        raise RuntimeError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    config["UPSTREAM_BASE_URL"] = config["UPSTREAM_BASE_URL"].rstrip("/")

    # Optional with defaults
    config["ACCESS_TOKENS"] = os.environ.get("ACCESS_TOKENS", "")
    config["CACHE_TTL_S"] = os.environ.get("CACHE_TTL_S", "5")
    config["UPSTREAM_TIMEOUT_S"] = os.environ.get("UPSTREAM_TIMEOUT_S", "10")
    config["GAUGE_MAX_W"] = os.environ.get("GAUGE_MAX_W", "4500")
    config["DISPLAY_TIMEZONE"] = os.environ.get("DISPLAY_TIMEZONE", "")

    for key in ("CACHE_TTL_S", "UPSTREAM_TIMEOUT_S", "GAUGE_MAX_W"):
        try:
            number = float(config[key])
        except ValueError:
            raise RuntimeError(f"{key} must be numeric (got '{config[key]}')") from None
        if number <= 0 and key != "CACHE_TTL_S":
            raise RuntimeError(f"{key} must be > 0")

    try:
        resolve_timezone(config["DISPLAY_TIMEZONE"])
    except ValueError as exc:
        raise RuntimeError(str(exc)) from exc

    return config


def _cors_origins() -> list[str]:
    """Allowed CORS origins from CORS_ORIGINS (comma-separated)."""
    raw = os.environ.get("CORS_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: config validation, gate and HTTP client setup.

    Startup:
        - Validates environment variables.
        - Builds the AccessGate from ACCESS_TOKENS.
        - Opens the pooled upstream httpx client.

    Shutdown:
        - Closes the upstream client.
    """
    config = _load_env_config()
    app.state.config = config

    tokens = parse_access_tokens(config["ACCESS_TOKENS"])
    app.state.gate = AccessGate(tokens)
    if tokens:
        logger.info("Parsed %d access token(s) from ACCESS_TOKENS", len(tokens))
    else:
        logger.warning("ACCESS_TOKENS is empty, access gate is OPEN (development mode)")

    app.state.http_client = httpx.AsyncClient(
        timeout=float(config["UPSTREAM_TIMEOUT_S"]),
        verify=True,
    )

    logger.info("Environment validated, dashboard gateway ready")
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        logger.info("Dashboard gateway shutting down")


app = FastAPI(
    title="Solar Meter Dashboard Gateway",
    description="Access gate and proxy for solar inverter telemetry.",
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_methods=["GET"],
    allow_headers=["Authorization", "X-API-Key"],
)

app.include_router(health_router)
app.include_router(access_router)
app.include_router(proxy_router)
app.include_router(dashboard_router)


@app.get("/")
async def root() -> dict:
    """Root status endpoint.

    Returns:
        dict: JSON object with application status.
    """
    return {"status": "ok"}
