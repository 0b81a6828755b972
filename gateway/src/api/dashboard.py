"""
GET /api/dashboard endpoint returning the fully rendered dashboard state.

Runs one refresh cycle of the dashboard pipeline against upstream with the
caller's credential, rendering into a fresh ChartSink, and returns the
Chart.js-ready snapshot. Lets thin clients draw the dashboard without
re-implementing normalization, banding and yearly reduction.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-017)

TODO:
- None
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from dashboard.src.config import resolve_timezone
from dashboard.src.gauge import DEFAULT_GAUGE_MAX_W
from dashboard.src.pipeline import AUTH_ERROR_MESSAGE, CycleStatus, RefreshPipeline
from dashboard.src.sink import ChartSink
from dashboard.src.upstream import UpstreamClient
from gateway.src.api.deps import AccessToken, HttpClient, config_float, forwarded_api_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["dashboard"])


# ---------------------------------------------------------------------------
# Pydantic response model
# ---------------------------------------------------------------------------


class DashboardResponse(BaseModel):
    """Rendered dashboard state after one refresh cycle.

    Attributes:
        status: Cycle status: ``ok`` or ``error``.
        gauge: Doughnut gauge labels and slice percentages.
        power_display: Formatted current power, e.g. ``"1,234 W"``.
        yield_display: Formatted total yield, e.g. ``"12 kWh"``.
        time_series: Line chart of today's power, or a placeholder.
        yearly_yield: Bar chart with mean overlay, or a placeholder.
        error: Cycle-level error message, if any.
        refreshed_at: ISO timestamp of a fully successful refresh.
    """

    status: str
    gauge: dict[str, Any]
    power_display: str | None
    yield_display: str | None
    time_series: dict[str, Any]
    yearly_yield: dict[str, Any]
    error: str | None
    refreshed_at: str | None


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    request: Request,
    token: AccessToken,
    http_client: HttpClient,
) -> DashboardResponse:
    """Run one refresh cycle and return the rendered state.

    Raises:
        HTTPException: 401 if upstream rejected the forwarded credential.
    """
    config = request.app.state.config
    sink = ChartSink()
    pipeline = RefreshPipeline(
        client=UpstreamClient(
            config["UPSTREAM_BASE_URL"],
            access_token=token,
            api_key=forwarded_api_key(request),
            timeout_s=config_float(request, "UPSTREAM_TIMEOUT_S", 10.0),
            client=http_client,
        ),
        sink=sink,
        gauge_max_w=config_float(request, "GAUGE_MAX_W", DEFAULT_GAUGE_MAX_W),
        tz=resolve_timezone(config.get("DISPLAY_TIMEZONE", "")),
    )

    result = await pipeline.run_cycle()
    logger.debug("Dashboard cycle finished: status=%s errors=%s", result.status, result.errors)

    if result.status == CycleStatus.AUTH_ERROR:
        raise HTTPException(
            status_code=401,
            detail=AUTH_ERROR_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )

    return DashboardResponse(status=str(result.status), **sink.snapshot())
