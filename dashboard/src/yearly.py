"""
Yearly yield reducer: cumulative year-boundary readings to yearly production.

Upstream reports the inverter's cumulative yield at each year boundary. The
reducer normalizes the records, orders them by year, turns the cumulative
values into per-year deltas and computes a mean over full years only.

The first year on record and the still-running current year are partial, so
they are left out of the mean. Which year is "current" depends on the wall
clock unless ``current_year`` is passed in; the same input can therefore be
classified differently on January 1st than on December 31st.

CHANGELOG:
- 2026-10-19: Make current year injectable for deterministic tests (STORY-006)
- 2026-10-19: Initial creation (STORY-006)

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from dashboard.src.models import NoData, NormalizedYearEntry, YieldSeries
from dashboard.src.normalizer import normalize_year_records

logger = logging.getLogger(__name__)


def compute_deltas(entries: Sequence[NormalizedYearEntry]) -> list[int]:
    """Year-over-year production from cumulative values sorted by year.

    The first year has no predecessor and is reported as its raw cumulative
    value. Later years are ``max(0, current - previous)``, so a counter reset
    or a lower reading never shows up as negative production.
    """
    deltas: list[int] = []
    for idx, entry in enumerate(entries):
        if idx == 0:
            deltas.append(entry.cumulative_kwh)
        else:
            deltas.append(max(0, entry.cumulative_kwh - entries[idx - 1].cumulative_kwh))
    return deltas


def compute_mean(years: Sequence[int], deltas: Sequence[int], current_year: int) -> float:
    """Mean production over full years.

    A full year is neither the first entry nor ``current_year``. When no year
    qualifies the mean falls back to all deltas.

    Args:
        years: Years in ascending order.
        deltas: Production per year, parallel to *years*.
        current_year: The calendar year treated as still in progress.

    Returns:
        float: The mean, or ``0.0`` for an empty series.
    """
    full = [
        delta
        for idx, (year, delta) in enumerate(zip(years, deltas, strict=True))
        if idx > 0 and year != current_year
    ]
    if full:
        return sum(full) / len(full)
    if deltas:
        return sum(deltas) / len(deltas)
    return 0.0


def reduce_yearly_yield(records: Any, current_year: int | None = None) -> YieldSeries | NoData:
    """Reduce raw yearly records to a :class:`YieldSeries`.

    Args:
        records: The ``data`` array of the ``/api/yearly-yield`` response.
        current_year: Year excluded from the mean as partial. Defaults to the
            wall-clock year at call time.

    Returns:
        YieldSeries | NoData: The reduced series, or ``NoData`` when no record
        has a usable year.
    """
    if not isinstance(records, list):
        return NoData(reason="yearly data is not a list")

    entries = normalize_year_records(records)
    if not entries:
        return NoData(reason="no yearly records with a usable year")

    if len(entries) < len(records):
        logger.debug("Dropped %d unusable yearly record(s)", len(records) - len(entries))

    entries.sort(key=lambda entry: entry.year)
    years = [entry.year for entry in entries]
    deltas = compute_deltas(entries)

    if current_year is None:
        current_year = datetime.now().year

    return YieldSeries(
        years=years,
        delta_kwh=deltas,
        mean_kwh=compute_mean(years, deltas, current_year),
    )
