"""
Assembles the daily power curve from raw ``/api/today`` samples.

Samples arrive unordered as ``{"TimeStamp": <unix seconds>, "Power": <W>}``
with occasional casing variations. The assembler stable-sorts a copy by
timestamp, labels each point with its local time of day and rounds power to
whole watts.

CHANGELOG:
- 2026-10-19: Drop samples without a usable timestamp instead of failing (STORY-003)
- 2026-10-19: Initial creation (STORY-003)

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, tzinfo
from typing import Any

from dashboard.src.models import NoData, NormalizedSample, TimeSeries
from dashboard.src.normalizer import (
    POWER_ALIASES,
    TIMESTAMP_ALIASES,
    coerce_number,
    resolve_field,
    round_half_up,
)

logger = logging.getLogger(__name__)

# en-US two-digit hour and minute, e.g. "09:05 AM"
LABEL_FORMAT = "%I:%M %p"


def format_time_label(timestamp: float, tz: tzinfo | None = None) -> str:
    """Format a unix timestamp as a local hour:minute label.

    Args:
        timestamp: Seconds since the epoch.
        tz: Display timezone; ``None`` uses the system local zone.

    Returns:
        str: Label such as ``"02:30 PM"``.
    """
    return datetime.fromtimestamp(timestamp, tz=tz).strftime(LABEL_FORMAT)


def assemble_time_series(samples: Any, tz: tzinfo | None = None) -> TimeSeries | NoData:
    """Turn raw daily samples into an ordered, labelled power series.

    The input is never mutated. Ties on timestamp keep their original
    relative order. Missing power counts as 0 W.

    Args:
        samples: The ``data`` array of the ``/api/today`` response.
        tz: Display timezone for labels; ``None`` uses the system local zone.

    Returns:
        TimeSeries | NoData: The assembled series, or ``NoData`` when the
        input is empty, not a list, or contains no sample with a usable
        timestamp.
    """
    if not isinstance(samples, list) or not samples:
        return NoData(reason="no samples")

    keyed: list[tuple[float, Mapping[str, Any]]] = []
    for sample in samples:
        if not isinstance(sample, Mapping):
            continue
        timestamp = coerce_number(resolve_field(sample, TIMESTAMP_ALIASES))
        if timestamp is None:
            logger.debug("Dropping sample without timestamp: %r", sample)
            continue
        keyed.append((timestamp, sample))

    # Stable sort: equal timestamps keep input order
    ordered = sorted(keyed, key=lambda pair: pair[0])

    points: list[NormalizedSample] = []
    for timestamp, sample in ordered:
        try:
            label = format_time_label(timestamp, tz)
        except (OverflowError, OSError, ValueError):
            logger.debug("Dropping sample with out-of-range timestamp %s", timestamp)
            continue
        power = coerce_number(resolve_field(sample, POWER_ALIASES)) or 0.0
        points.append(NormalizedSample(label=label, power_w=max(0, round_half_up(power))))

    if not points:
        return NoData(reason="no usable samples")
    return TimeSeries(samples=tuple(points))
