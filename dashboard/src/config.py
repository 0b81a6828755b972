"""
Refresh daemon configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
All values come from environment variables or a ``.env`` file; no hardcoded
URLs or credentials.

CHANGELOG:
- 2026-10-19: Validate DISPLAY_TIMEZONE at startup (STORY-010)
- 2026-10-19: Initial creation (STORY-010)

TODO:
- None
"""

from __future__ import annotations

from datetime import UTC, tzinfo
from urllib.parse import urlsplit
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings

_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


def resolve_timezone(name: str) -> tzinfo | None:
    """Resolve an IANA timezone name; empty means the system local zone.

    Raises:
        ValueError: If *name* is not a known timezone.
    """
    if not name:
        return None
    if name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone '{name}'") from exc


class DashboardSettings(BaseSettings):
    """Refresh daemon configuration.

    Attributes:
        upstream_base_url: Base URL of the SMA reader API (HTTPS, or HTTP for
            a gateway on localhost).
        access_token: Bearer token forwarded on every upstream call.
        api_key: Optional API secret forwarded as ``X-API-Key``.
        gauge_max_w: Full-scale value of the power gauge in watts.
        refresh_interval_s: Seconds between refresh cycles (min 5).
        request_timeout_s: Per-request upstream timeout in seconds.
        display_timezone: IANA timezone for time labels; empty for local.
        health_path: Health JSON file path; empty disables the health file.
    """

    upstream_base_url: str
    access_token: str
    api_key: str = ""
    gauge_max_w: float = 4500.0
    refresh_interval_s: int = 60
    request_timeout_s: float = 10.0
    display_timezone: str = ""
    health_path: str = ""

    @field_validator("upstream_base_url")
    @classmethod
    def upstream_url_must_be_secure(cls, v: str) -> str:
        """Require HTTPS, except for plain HTTP to a local gateway."""
        parts = urlsplit(v)
        if parts.scheme == "https":
            return v.rstrip("/")
        if parts.scheme == "http" and parts.hostname in _LOCAL_HOSTS:
            return v.rstrip("/")
        raise ValueError(
            f"UPSTREAM_BASE_URL must use HTTPS (got: '{v[:30]}'). "
            "Plain HTTP is only accepted for localhost."
        )

    @field_validator("gauge_max_w")
    @classmethod
    def gauge_max_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("GAUGE_MAX_W must be > 0")
        return v

    @field_validator("refresh_interval_s")
    @classmethod
    def refresh_interval_must_be_reasonable(cls, v: int) -> int:
        """Keep at least 5 seconds between cycles to spare the upstream API."""
        if v < 5:
            raise ValueError("REFRESH_INTERVAL_S must be >= 5")
        return v

    @field_validator("request_timeout_s")
    @classmethod
    def request_timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("REQUEST_TIMEOUT_S must be > 0")
        return v

    @field_validator("display_timezone")
    @classmethod
    def display_timezone_must_exist(cls, v: str) -> str:
        resolve_timezone(v)
        return v

    @property
    def tz(self) -> tzinfo | None:
        """The resolved display timezone."""
        return resolve_timezone(self.display_timezone)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}
