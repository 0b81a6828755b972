"""
Pure normalizers for loosely-shaped upstream telemetry records.

The upstream SMA reader does not use stable key names: a yearly record may
carry its year as ``year``, ``Year``, ``year_value`` or ``yearVal`` and its
yield under five different keys. Each logical attribute therefore has an
ordered tuple of candidate keys, resolved first-present-wins against a plain
mapping.

Yields arrive in watt-hours and are converted to kilowatt-hours with half-up
rounding so that ``2500 Wh`` becomes ``3 kWh`` (Python's built-in ``round``
would give 2).

This module is pure: no I/O, no clock, no logging side effects beyond DEBUG.

CHANGELOG:
- 2026-10-20: Treat integers beyond float range as non-numeric (STORY-018)
- 2026-10-19: Add parse_current_reading for the gauge panel (STORY-004)
- 2026-10-19: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from dashboard.src.models import CurrentReading, NormalizedYearEntry

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Field aliases, highest priority first
# ---------------------------------------------------------------------------

YEAR_ALIASES: tuple[str, ...] = ("year", "Year", "year_value", "yearVal")
YIELD_ALIASES: tuple[str, ...] = ("yield", "Yield", "total", "Total", "total_yield")

TIMESTAMP_ALIASES: tuple[str, ...] = ("TimeStamp", "timestamp", "Timestamp", "ts")
POWER_ALIASES: tuple[str, ...] = ("Power", "power")

_WH_PER_KWH = 1000


# ---------------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------------


def resolve_field(record: Mapping[str, Any], aliases: Iterable[str]) -> Any:
    """Return the value of the first alias present in *record* and not ``None``.

    Args:
        record: Any string-keyed mapping.
        aliases: Candidate keys in priority order.

    Returns:
        The first non-``None`` value, or ``None`` if no alias is present.
    """
    for key in aliases:
        value = record.get(key)
        if value is not None:
            return value
    return None


def coerce_number(value: Any) -> float | None:
    """Coerce an upstream scalar to a finite float.

    Accepts ints, floats and numeric strings. Booleans, NaN, infinities, integers
    beyond float range and anything else return ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties towards positive infinity."""
    return math.floor(value + 0.5)


def coerce_year(value: Any) -> int | None:
    """Parse a year value; non-integral or non-numeric years return ``None``."""
    number = coerce_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def wh_to_kwh(value: Any) -> int:
    """Convert a watt-hour value to whole kilowatt-hours, zero for junk."""
    number = coerce_number(value)
    if number is None:
        return 0
    return max(0, round_half_up(number / _WH_PER_KWH))


# ---------------------------------------------------------------------------
# Record normalizers
# ---------------------------------------------------------------------------


def normalize_year_record(record: Any) -> NormalizedYearEntry | None:
    """Normalize one upstream yearly record.

    Resolves the year over :data:`YEAR_ALIASES` and the yield over
    :data:`YIELD_ALIASES`. The first present alias is authoritative: a year
    that is present but unparsable does not fall through to a lower-priority
    alias.

    Args:
        record: A raw yearly record, expected to be a mapping.

    Returns:
        NormalizedYearEntry | None: The canonical entry, or ``None`` if the
        record is not a mapping or has no usable year.
    """
    if not isinstance(record, Mapping):
        logger.debug("Dropping yearly record of type %s", type(record).__name__)
        return None

    year = coerce_year(resolve_field(record, YEAR_ALIASES))
    if year is None:
        logger.debug("Dropping yearly record without usable year: %r", record)
        return None

    cumulative_kwh = wh_to_kwh(resolve_field(record, YIELD_ALIASES))
    return NormalizedYearEntry(year=year, cumulative_kwh=cumulative_kwh)


def normalize_year_records(records: Iterable[Any]) -> list[NormalizedYearEntry]:
    """Normalize a sequence of yearly records, dropping unusable ones.

    Input order is preserved.
    """
    entries: list[NormalizedYearEntry] = []
    for record in records:
        entry = normalize_year_record(record)
        if entry is not None:
            entries.append(entry)
    return entries


def parse_current_reading(data: Any) -> CurrentReading:
    """Build a :class:`CurrentReading` from the ``data`` object of ``/api/current``.

    Missing or non-numeric ``power`` and ``total_yield`` become 0. Power is
    rounded half-up to whole watts; negative values are floored at 0.
    ``total_yield`` is reported in Wh and converted to kWh.
    """
    if not isinstance(data, Mapping):
        data = {}
    power = coerce_number(data.get("power")) or 0.0
    total_yield_wh = coerce_number(data.get("total_yield")) or 0.0
    return CurrentReading(
        power_w=max(0, round_half_up(power)),
        total_yield_kwh=wh_to_kwh(round_half_up(total_yield_wh)),
    )
