"""
Tests for the Chart.js rendering sink.

Tests verify:
- Initial state shows the zone layout and "No data available" placeholders.
- Gauge bands and the formatted power/yield displays are applied.
- The yearly chart carries the bar series and a dashed mean line last.
- NoData resets a chart to its placeholder.
- apply_refreshed clears the error banner.
- snapshot() returns an independent copy.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-007)

TODO:
- None
"""

from __future__ import annotations

from datetime import UTC, datetime

from dashboard.src.models import (
    NO_DATA_MESSAGE,
    CurrentReading,
    GaugeBands,
    NoData,
    NormalizedSample,
    TimeSeries,
    YieldSeries,
)
from dashboard.src.sink import ChartSink, format_mean_label


def _series() -> TimeSeries:
    return TimeSeries(
        samples=(
            NormalizedSample(label="10:00 AM", power_w=120),
            NormalizedSample(label="10:05 AM", power_w=340),
        )
    )


def _yearly() -> YieldSeries:
    return YieldSeries(years=[2022, 2023], delta_kwh=[1000, 1500], mean_kwh=1250.4)


class TestInitialState:
    """A fresh sink looks like an empty dashboard."""

    def test_placeholders(self) -> None:
        snapshot = ChartSink().snapshot()
        assert snapshot["time_series"] == {"placeholder": NO_DATA_MESSAGE}
        assert snapshot["yearly_yield"] == {"placeholder": NO_DATA_MESSAGE}
        assert snapshot["gauge"]["datasets"][0]["data"] == [60.0, 20.0, 20.0, 0.0]
        assert snapshot["error"] is None
        assert snapshot["refreshed_at"] is None


class TestGauge:
    """Gauge bands and text displays."""

    def test_apply_gauge_bands(self) -> None:
        sink = ChartSink()
        bands = GaugeBands(normal_pct=60, warning_pct=10, critical_pct=0, remaining_pct=30)
        sink.apply_gauge_bands(bands, CurrentReading(power_w=3150, total_yield_kwh=12346))

        snapshot = sink.snapshot()
        assert snapshot["gauge"]["labels"] == ["Normal", "Warning", "Critical", "Remaining"]
        assert snapshot["gauge"]["datasets"][0]["data"] == [60, 10, 0, 30]
        assert snapshot["power_display"] == "3,150 W"
        assert snapshot["yield_display"] == "12,346 kWh"


class TestCharts:
    """Line and bar chart datasets."""

    def test_time_series(self) -> None:
        sink = ChartSink()
        sink.apply_time_series(_series())

        chart = sink.snapshot()["time_series"]
        assert chart["labels"] == ["10:00 AM", "10:05 AM"]
        assert chart["datasets"][0]["label"] == "Power (W)"
        assert chart["datasets"][0]["data"] == [120, 340]

    def test_yearly_series_with_mean_line(self) -> None:
        sink = ChartSink()
        sink.apply_yearly_series(_yearly())

        chart = sink.snapshot()["yearly_yield"]
        assert chart["labels"] == ["2022", "2023"]
        bars, mean = chart["datasets"]
        assert bars["type"] == "bar"
        assert bars["data"] == [1000, 1500]
        assert mean["type"] == "line"
        assert mean["data"] == [1250.4, 1250.4]
        assert mean["label"] == "Mean (1,250 kWh)"
        assert mean["borderDash"] == [5, 5]

    def test_no_data_resets_to_placeholder(self) -> None:
        sink = ChartSink()
        sink.apply_time_series(_series())
        sink.apply_yearly_series(_yearly())

        sink.apply_time_series(NoData())
        sink.apply_yearly_series(NoData())

        snapshot = sink.snapshot()
        assert snapshot["time_series"] == {"placeholder": NO_DATA_MESSAGE}
        assert snapshot["yearly_yield"] == {"placeholder": NO_DATA_MESSAGE}

    def test_mean_label_rounds_half_up(self) -> None:
        assert format_mean_label(1234.5) == "Mean (1,235 kWh)"
        assert format_mean_label(0) == "Mean (0 kWh)"


class TestBannerAndSnapshot:
    """Error banner lifecycle and snapshot isolation."""

    def test_refresh_clears_error(self) -> None:
        sink = ChartSink()
        sink.apply_error("Failed to fetch data: boom")
        assert sink.snapshot()["error"] == "Failed to fetch data: boom"

        at = datetime(2026, 10, 19, 8, 30, tzinfo=UTC)
        sink.apply_refreshed(at)

        snapshot = sink.snapshot()
        assert snapshot["error"] is None
        assert snapshot["refreshed_at"] == "2026-10-19T08:30:00+00:00"

    def test_snapshot_is_a_copy(self) -> None:
        sink = ChartSink()
        sink.apply_time_series(_series())

        snapshot = sink.snapshot()
        snapshot["time_series"]["labels"].append("tampered")

        assert sink.snapshot()["time_series"]["labels"] == ["10:00 AM", "10:05 AM"]
