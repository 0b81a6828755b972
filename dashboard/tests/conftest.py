"""
Shared test fixtures for dashboard pipeline tests.

Provides environment variable fixtures for DashboardSettings tests and a
recording sink plus a scripted upstream fetcher for pipeline tests. All
dashboard env vars are cleaned before each test to ensure isolation.

CHANGELOG:
- 2026-10-19: Add RecordingSink and FakeUpstream (STORY-008)
- 2026-10-19: Initial creation (STORY-010)

TODO:
- None
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest

# All DashboardSettings environment variable names, used for cleanup.
_ALL_DASHBOARD_ENV_VARS = (
    "UPSTREAM_BASE_URL",
    "ACCESS_TOKEN",
    "API_KEY",
    "GAUGE_MAX_W",
    "REFRESH_INTERVAL_S",
    "REQUEST_TIMEOUT_S",
    "DISPLAY_TIMEZONE",
    "HEALTH_PATH",
)


@pytest.fixture(autouse=True)
def _clean_dashboard_env(monkeypatch: pytest.MonkeyPatch, tmp_path: str) -> None:
    """Remove all dashboard env vars and isolate from .env files before each test.

    Changes working directory to tmp_path so no .env file is accidentally
    loaded by Pydantic BaseSettings.
    """
    for var in _ALL_DASHBOARD_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def env_vars_required_only(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set only the required environment variables."""
    env = {
        "UPSTREAM_BASE_URL": "https://sma.example.com",
        "ACCESS_TOKEN": "reader-token",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


# ---------------------------------------------------------------------------
# Pipeline doubles
# ---------------------------------------------------------------------------


class RecordingSink:
    """Rendering sink that records every call in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def apply_gauge_bands(self, bands: Any, reading: Any) -> None:
        self.calls.append(("gauge", (bands, reading)))

    def apply_time_series(self, series: Any) -> None:
        self.calls.append(("time_series", (series,)))

    def apply_yearly_series(self, series: Any) -> None:
        self.calls.append(("yearly", (series,)))

    def apply_error(self, message: str) -> None:
        self.calls.append(("error", (message,)))

    def apply_refreshed(self, at: datetime) -> None:
        self.calls.append(("refreshed", (at,)))

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def last(self, name: str) -> tuple[Any, ...]:
        return [args for call_name, args in self.calls if call_name == name][-1]


class FakeUpstream:
    """Upstream fetcher answering from a path -> payload-or-exception map."""

    def __init__(self, responses: dict[str, Any]) -> None:
        self.responses = responses
        self.requested: list[str] = []

    async def fetch_json(self, path: str) -> dict[str, Any]:
        self.requested.append(path)
        outcome = self.responses[path]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture()
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def ok_responses() -> dict[str, Any]:
    """A consistent set of successful upstream payloads."""
    return {
        "/api/current": {"success": True, "data": {"power": 3150.4, "total_yield": 12_345_600}},
        "/api/today": {
            "success": True,
            "data": [
                {"TimeStamp": 1_700_000_600, "Power": 820.6},
                {"TimeStamp": 1_700_000_000, "Power": 410.2},
            ],
        },
        "/api/yearly-yield": {
            "success": True,
            "data": [
                {"year": 2023, "yield": 1_500_000},
                {"Year": 2022, "Yield": 1_000_000},
                {"year": 2024, "total_yield": 1_200_000},
            ],
        },
    }


@pytest.fixture()
def make_upstream() -> type[FakeUpstream]:
    """Factory for FakeUpstream; test modules cannot import conftest directly."""
    return FakeUpstream
