"""
Refresh pipeline: one fetch-transform-render cycle for the dashboard.

A cycle fetches the current reading, today's samples and the yearly yield
records concurrently, routes each payload through its pure transform and
writes the result into a :class:`~dashboard.src.sink.RenderSink`.

Failure policy:
- A 401 on any of the three calls aborts the cycle. Exactly one
  authentication message reaches the sink and no panel is updated, since all
  three calls share the same credential.
- Any other failure is confined to its resource; the remaining panels are
  still rendered and one cycle-level error message is applied at the end.
- A payload with ``success`` not true is skipped and leaves its panel as is.
- ``run_cycle`` never raises for upstream or data problems.

Cycles are not coordinated with each other. Two overlapping cycles both write
to the sink and the last write wins.

CHANGELOG:
- 2026-10-20: Prefix error entries with the failing resource, log NoData reasons (STORY-018)
- 2026-10-19: Apply results only after all fetches resolve so a 401 can abort (STORY-008)
- 2026-10-19: Initial creation (STORY-008)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from typing import Any, Protocol

from dashboard.src.errors import AuthenticationError, TransportError
from dashboard.src.gauge import DEFAULT_GAUGE_MAX_W, compute_gauge_bands
from dashboard.src.models import NoData
from dashboard.src.normalizer import parse_current_reading
from dashboard.src.sink import RenderSink
from dashboard.src.timeseries import assemble_time_series
from dashboard.src.upstream import CURRENT_PATH, TODAY_PATH, YEARLY_PATH
from dashboard.src.yearly import reduce_yearly_yield

logger = logging.getLogger(__name__)

AUTH_ERROR_MESSAGE = "Unauthorized: Invalid API credentials"
FETCH_ERROR_PREFIX = "Failed to fetch data"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _describe_failure(path: str, exc: Exception) -> str:
    """Per-resource error entry, e.g. ``"/api/today: HTTP 502"``."""
    resource = exc.path if isinstance(exc, TransportError) and exc.path else path
    return f"{resource}: {str(exc) or type(exc).__name__}"


class JsonFetcher(Protocol):
    """Anything that can fetch an upstream JSON object by path."""

    async def fetch_json(self, path: str) -> dict[str, Any]: ...


class CycleStatus(enum.StrEnum):
    OK = "ok"
    AUTH_ERROR = "auth_error"
    ERROR = "error"


@dataclass(frozen=True)
class CycleResult:
    """Outcome of one refresh cycle.

    Attributes:
        status: Overall cycle status.
        errors: Per-resource error descriptions, empty on success.
        skipped: Paths whose payload reported ``success`` false.
        refreshed_at: Completion time of a fully successful cycle.
    """

    status: CycleStatus
    errors: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    refreshed_at: datetime | None = None


@dataclass
class RefreshPipeline:
    """Drives refresh cycles from an upstream fetcher into a rendering sink.

    Attributes:
        client: Upstream fetcher, usually an
            :class:`~dashboard.src.upstream.UpstreamClient`.
        sink: Rendering sink receiving the derived series.
        gauge_max_w: Full-scale value of the power gauge.
        tz: Display timezone for time labels; ``None`` for the system zone.
        current_year: Year treated as partial in the yearly mean; ``None``
            uses the wall-clock year of each cycle.
        clock: Returns "now" for the refresh timestamp.
    """

    client: JsonFetcher
    sink: RenderSink
    gauge_max_w: float = DEFAULT_GAUGE_MAX_W
    tz: tzinfo | None = None
    current_year: int | None = None
    clock: Callable[[], datetime] = field(default=_utc_now)

    async def run_cycle(self) -> CycleResult:
        """Run one full refresh cycle.

        Returns:
            CycleResult: Status and diagnostics of the cycle.
        """
        paths = (CURRENT_PATH, TODAY_PATH, YEARLY_PATH)
        outcomes = await asyncio.gather(
            *(self.client.fetch_json(path) for path in paths),
            return_exceptions=True,
        )

        for outcome in outcomes:
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                raise outcome

        if any(isinstance(outcome, AuthenticationError) for outcome in outcomes):
            logger.warning("Refresh cycle aborted: upstream rejected credentials")
            self.sink.apply_error(AUTH_ERROR_MESSAGE)
            return CycleResult(status=CycleStatus.AUTH_ERROR, errors=(AUTH_ERROR_MESSAGE,))

        errors: list[str] = []
        skipped: list[str] = []
        for path, outcome in zip(paths, outcomes, strict=True):
            if isinstance(outcome, Exception):
                logger.warning("Fetching %s failed: %s", path, outcome)
                errors.append(_describe_failure(path, outcome))
                continue
            if not outcome.get("success"):
                logger.warning("Upstream %s reported success=false, skipping panel", path)
                skipped.append(path)
                continue
            try:
                self._render(path, outcome.get("data"))
            except Exception as exc:
                logger.error("Rendering %s failed", path, exc_info=True)
                errors.append(f"{path}: {exc}")

        if errors:
            message = f"{FETCH_ERROR_PREFIX}: {'; '.join(errors)}"
            self.sink.apply_error(message)
            return CycleResult(
                status=CycleStatus.ERROR, errors=tuple(errors), skipped=tuple(skipped)
            )

        refreshed_at = self.clock()
        self.sink.apply_refreshed(refreshed_at)
        logger.info("Refresh cycle complete (skipped=%d)", len(skipped))
        return CycleResult(
            status=CycleStatus.OK, skipped=tuple(skipped), refreshed_at=refreshed_at
        )

    def _render(self, path: str, data: Any) -> None:
        """Route one successful payload to its transform and the sink."""
        if path == CURRENT_PATH:
            reading = parse_current_reading(data)
            self.sink.apply_gauge_bands(
                compute_gauge_bands(reading.power_w, self.gauge_max_w), reading
            )
        elif path == TODAY_PATH:
            series = assemble_time_series(data, self.tz)
            if isinstance(series, NoData):
                logger.debug("No chartable data for %s: %s", path, series.reason)
            self.sink.apply_time_series(series)
        elif path == YEARLY_PATH:
            yearly = reduce_yearly_yield(data, current_year=self.current_year)
            if isinstance(yearly, NoData):
                logger.debug("No chartable data for %s: %s", path, yearly.reason)
            self.sink.apply_yearly_series(yearly)
