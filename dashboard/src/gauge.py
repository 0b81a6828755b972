"""
Gauge banding for the instantaneous power gauge.

Splits a reading, expressed as a percentage of the configured maximum, into
the normal (0-60%), warning (60-80%) and critical (80-100%) zones plus the
remaining capacity. Each slice is its own share, so a chart library can draw
them as consecutive doughnut segments.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-004)

TODO:
- None
"""

from __future__ import annotations

from dashboard.src.models import GaugeBands

DEFAULT_GAUGE_MAX_W = 4500.0

NORMAL_LIMIT_PCT = 60.0
WARNING_LIMIT_PCT = 80.0
FULL_SCALE_PCT = 100.0


def compute_gauge_bands(reading: float, max_value: float = DEFAULT_GAUGE_MAX_W) -> GaugeBands:
    """Map a reading onto the three gauge zones and remaining capacity.

    Readings above *max_value* are clamped to 100%, negative readings to 0%.

    Args:
        reading: Instantaneous value, in the same unit as *max_value*.
        max_value: Full-scale value of the gauge.

    Returns:
        GaugeBands: Slices that sum to 100.

    Raises:
        ValueError: If *max_value* is not positive.
    """
    if max_value <= 0:
        raise ValueError(f"Gauge max_value must be > 0 (got {max_value})")

    pct = max(0.0, min(reading / max_value * FULL_SCALE_PCT, FULL_SCALE_PCT))

    normal = min(pct, NORMAL_LIMIT_PCT)
    warning = min(pct, WARNING_LIMIT_PCT) - NORMAL_LIMIT_PCT if pct > NORMAL_LIMIT_PCT else 0.0
    critical = pct - WARNING_LIMIT_PCT if pct > WARNING_LIMIT_PCT else 0.0

    return GaugeBands(
        normal_pct=normal,
        warning_pct=warning,
        critical_pct=critical,
        remaining_pct=FULL_SCALE_PCT - pct,
    )
