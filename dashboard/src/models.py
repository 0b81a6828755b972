"""
Pydantic models for normalized dashboard telemetry.

Every model is an immutable value object recomputed on each refresh cycle and
handed to the rendering sink. Raw upstream records stay plain mappings; only
normalized shapes get a model.

CHANGELOG:
- 2026-10-19: Add NoData signal model (STORY-003)
- 2026-10-19: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

NO_DATA_MESSAGE = "No data available"


class CurrentReading(BaseModel):
    """Instantaneous inverter reading from the ``/api/current`` resource.

    Attributes:
        power_w: Current AC power in watts, rounded to an integer.
        total_yield_kwh: Lifetime energy yield in kilowatt-hours.
    """

    model_config = {"frozen": True}

    power_w: int = Field(ge=0)
    total_yield_kwh: int = Field(ge=0)


class NormalizedSample(BaseModel):
    """One point of the daily power curve.

    Attributes:
        label: Local time-of-day label, e.g. ``"09:05 AM"``.
        power_w: Power in whole watts.
    """

    model_config = {"frozen": True}

    label: str
    power_w: int = Field(ge=0)


class TimeSeries(BaseModel):
    """Daily power curve ordered by ascending timestamp."""

    model_config = {"frozen": True}

    samples: tuple[NormalizedSample, ...]

    @property
    def labels(self) -> list[str]:
        return [sample.label for sample in self.samples]

    @property
    def values(self) -> list[int]:
        return [sample.power_w for sample in self.samples]


class NormalizedYearEntry(BaseModel):
    """A yearly record after alias resolution and Wh to kWh conversion.

    Attributes:
        year: Calendar year.
        cumulative_kwh: Cumulative yield reported at that year boundary.
    """

    model_config = {"frozen": True}

    year: int
    cumulative_kwh: int = Field(ge=0)


class YieldSeries(BaseModel):
    """Year-over-year yield, ready for a bar chart with a mean overlay.

    Attributes:
        years: Years in ascending order.
        delta_kwh: Production per year; the first entry is the raw cumulative
            value, later entries are floored at zero.
        mean_kwh: Mean production over full years (see
            :func:`~dashboard.src.yearly.compute_mean`).
    """

    model_config = {"frozen": True}

    years: list[int]
    delta_kwh: list[int]
    mean_kwh: float

    @model_validator(mode="after")
    def _parallel_arrays(self) -> YieldSeries:
        if len(self.years) != len(self.delta_kwh):
            raise ValueError(
                f"years and delta_kwh must have equal length "
                f"(got {len(self.years)} and {len(self.delta_kwh)})"
            )
        return self

    @property
    def mean_series(self) -> list[float]:
        """The mean repeated once per year, rendered as a flat reference line."""
        return [self.mean_kwh] * len(self.years)


class GaugeBands(BaseModel):
    """Percentage breakdown of a reading for a semicircular gauge.

    The four slices are each their own share of the 0-100 scale, not
    cumulative, and sum to 100.
    """

    model_config = {"frozen": True}

    normal_pct: float = Field(ge=0)
    warning_pct: float = Field(ge=0)
    critical_pct: float = Field(ge=0)
    remaining_pct: float = Field(ge=0)

    def as_list(self) -> list[float]:
        """Slices in chart order: normal, warning, critical, remaining."""
        return [self.normal_pct, self.warning_pct, self.critical_pct, self.remaining_pct]


class NoData(BaseModel):
    """Explicit "nothing to chart" signal, distinct from an empty series.

    Attributes:
        reason: Short diagnostic explaining why no series was produced.
    """

    model_config = {"frozen": True}

    reason: str = "empty"
