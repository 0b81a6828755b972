"""
Rendering sinks for the refresh pipeline.

:class:`RenderSink` is the contract the pipeline writes to; it never reads
state back. :class:`ChartSink` is the concrete sink used by the gateway and
the CLI: it keeps the last applied state in Chart.js dataset shape (a
semicircular doughnut gauge, a line chart for today's power and a bar chart
with a dashed mean overlay for yearly yield) and exposes it via
:meth:`ChartSink.snapshot`.

CHANGELOG:
- 2026-10-19: Add error banner and refresh timestamp (STORY-007)
- 2026-10-19: Initial creation (STORY-007)

TODO:
- None
"""

from __future__ import annotations

import copy
from datetime import datetime
from typing import Any, Protocol

from dashboard.src.models import (
    NO_DATA_MESSAGE,
    CurrentReading,
    GaugeBands,
    NoData,
    TimeSeries,
    YieldSeries,
)
from dashboard.src.normalizer import round_half_up

# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


class RenderSink(Protocol):
    """Receives derived series from the pipeline, once per panel per cycle."""

    def apply_gauge_bands(self, bands: GaugeBands, reading: CurrentReading) -> None: ...

    def apply_time_series(self, series: TimeSeries | NoData) -> None: ...

    def apply_yearly_series(self, series: YieldSeries | NoData) -> None: ...

    def apply_error(self, message: str) -> None: ...

    def apply_refreshed(self, at: datetime) -> None: ...


# ---------------------------------------------------------------------------
# Chart.js sink
# ---------------------------------------------------------------------------

GAUGE_LABELS = ["Normal", "Warning", "Critical", "Remaining"]
GAUGE_COLORS = ["#7cf3c6", "#ffa500", "#ff4444", "#e0e0e0"]
ACCENT_COLOR = "#7cf3c6"
MEAN_LINE_COLOR = "#ff9500"


def _placeholder() -> dict[str, Any]:
    return {"placeholder": NO_DATA_MESSAGE}


def format_mean_label(mean_kwh: float) -> str:
    """Legend label for the mean overlay, e.g. ``"Mean (1,234 kWh)"``."""
    return f"Mean ({round_half_up(mean_kwh):,} kWh)"


class ChartSink:
    """Keeps the last rendered dashboard state in Chart.js shape.

    Initial state mirrors an empty dashboard: the gauge shows its zone layout,
    both charts show the "no data" placeholder.
    """

    def __init__(self) -> None:
        self._gauge: dict[str, Any] = {
            "labels": list(GAUGE_LABELS),
            "datasets": [{"data": [60.0, 20.0, 20.0, 0.0], "backgroundColor": list(GAUGE_COLORS)}],
        }
        self._power_display: str | None = None
        self._yield_display: str | None = None
        self._time_series: dict[str, Any] = _placeholder()
        self._yearly: dict[str, Any] = _placeholder()
        self._error: str | None = None
        self._refreshed_at: str | None = None

    def apply_gauge_bands(self, bands: GaugeBands, reading: CurrentReading) -> None:
        self._gauge = {
            "labels": list(GAUGE_LABELS),
            "datasets": [{"data": bands.as_list(), "backgroundColor": list(GAUGE_COLORS)}],
        }
        self._power_display = f"{reading.power_w:,} W"
        self._yield_display = f"{reading.total_yield_kwh:,} kWh"

    def apply_time_series(self, series: TimeSeries | NoData) -> None:
        if isinstance(series, NoData):
            self._time_series = _placeholder()
            return
        self._time_series = {
            "labels": series.labels,
            "datasets": [
                {
                    "label": "Power (W)",
                    "data": series.values,
                    "borderColor": ACCENT_COLOR,
                    "fill": True,
                }
            ],
        }

    def apply_yearly_series(self, series: YieldSeries | NoData) -> None:
        if isinstance(series, NoData):
            self._yearly = _placeholder()
            return
        # Mean overlay must stay the last dataset
        self._yearly = {
            "labels": [str(year) for year in series.years],
            "datasets": [
                {
                    "label": "Energy (kWh)",
                    "type": "bar",
                    "data": list(series.delta_kwh),
                    "backgroundColor": ACCENT_COLOR,
                },
                {
                    "label": format_mean_label(series.mean_kwh),
                    "type": "line",
                    "data": series.mean_series,
                    "borderColor": MEAN_LINE_COLOR,
                    "borderDash": [5, 5],
                    "pointRadius": 0,
                },
            ],
        }

    def apply_error(self, message: str) -> None:
        self._error = message

    def apply_refreshed(self, at: datetime) -> None:
        """Record a fully successful refresh and clear any error banner."""
        self._refreshed_at = at.isoformat()
        self._error = None

    def snapshot(self) -> dict[str, Any]:
        """Return a JSON-serialisable deep copy of the current state."""
        return copy.deepcopy(
            {
                "gauge": self._gauge,
                "power_display": self._power_display,
                "yield_display": self._yield_display,
                "time_series": self._time_series,
                "yearly_yield": self._yearly,
                "error": self._error,
                "refreshed_at": self._refreshed_at,
            }
        )
