"""
Refresh daemon and CLI for the solar meter dashboard.

Runs refresh cycles against the upstream SMA reader API and keeps the
rendered dashboard state in a :class:`~dashboard.src.sink.ChartSink`.

Modes:
- ``--once``: run a single cycle, print the sink snapshot as JSON on stdout
  and exit 0 on success, 1 otherwise.
- default: run a cycle every ``REFRESH_INTERVAL_S`` seconds until SIGTERM or
  SIGINT. An exception in one iteration is logged and does not stop the loop.

Structured JSON logging is used for all events. When ``HEALTH_PATH`` is set a
HealthWriter records the outcome of every cycle.

CHANGELOG:
- 2026-10-19: Add --once mode for cron and debugging (STORY-012)
- 2026-10-19: Initial creation (STORY-012)

TODO:
- None
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import hashlib
import json
import logging
import signal
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from dashboard.src.pipeline import CycleResult, CycleStatus, RefreshPipeline

if TYPE_CHECKING:
    from dashboard.src.config import DashboardSettings
    from dashboard.src.health import HealthWriter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Structured JSON logging setup
# ---------------------------------------------------------------------------


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: int = logging.INFO) -> None:
    """Install the JSON formatter on the root logger, writing to stderr."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def masked_token(value: str | None) -> str:
    """Return a short non-reversible token fingerprint for diagnostics."""
    if not value:
        return "empty"
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:10]
    return f"len={len(value)} sha256={digest}"


def log_config_summary(settings: DashboardSettings) -> None:
    """Log a config summary at startup, masking the access token and API key."""
    logger.info(
        "Dashboard daemon starting with config: "
        "upstream_base_url=%s, gauge_max_w=%s, refresh_interval_s=%s, "
        "request_timeout_s=%s, display_timezone=%s, health_path=%s, "
        "access_token_masked=%s, api_key_masked=%s",
        settings.upstream_base_url,
        settings.gauge_max_w,
        settings.refresh_interval_s,
        settings.request_timeout_s,
        settings.display_timezone or "local",
        settings.health_path or "disabled",
        masked_token(settings.access_token),
        masked_token(settings.api_key),
    )


# ---------------------------------------------------------------------------
# Single iteration and loop
# ---------------------------------------------------------------------------


async def _refresh_once(
    *,
    pipeline: RefreshPipeline,
    health: HealthWriter | None = None,
) -> CycleResult:
    """Run one refresh cycle, never raising.

    Args:
        pipeline: The refresh pipeline.
        health: HealthWriter instance, or None to skip health writes.

    Returns:
        CycleResult: The cycle outcome; an unexpected exception maps to
        an ``ERROR`` result.
    """
    try:
        result = await pipeline.run_cycle()
    except Exception as exc:
        logger.error("Refresh cycle error", exc_info=True)
        result = CycleResult(status=CycleStatus.ERROR, errors=(str(exc),))

    if health is not None:
        try:
            health.record_cycle(result)
        except Exception:
            logger.warning("Failed to write health file", exc_info=True)
    return result


async def refresh_loop(
    *,
    pipeline: RefreshPipeline,
    refresh_interval_s: float,
    shutdown_event: asyncio.Event,
    health: HealthWriter | None = None,
) -> None:
    """Run refresh cycles until *shutdown_event* is set.

    Args:
        pipeline: The refresh pipeline.
        refresh_interval_s: Seconds between cycles.
        shutdown_event: Event to signal graceful shutdown.
        health: HealthWriter instance, or None to skip health writes.
    """
    logger.info("Refresh loop started (interval=%ss)", refresh_interval_s)
    while not shutdown_event.is_set():
        result = await _refresh_once(pipeline=pipeline, health=health)
        logger.info("Refresh cycle finished with status=%s", result.status)
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(shutdown_event.wait(), timeout=refresh_interval_s)
    logger.info("Refresh loop stopped")


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solar-dashboard",
        description="Refresh the solar meter dashboard from the upstream API.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single refresh cycle and print the dashboard state as JSON.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable DEBUG logging.",
    )
    return parser


def _handle_signal(shutdown_event: asyncio.Event) -> None:
    """Handle SIGTERM/SIGINT by setting the shutdown event."""
    logger.info("Received shutdown signal, initiating graceful shutdown")
    shutdown_event.set()


async def async_main(argv: list[str] | None = None) -> int:
    """Async entrypoint: load config, build the pipeline, run.

    Returns:
        int: Process exit code.
    """
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    from dashboard.src.config import DashboardSettings
    from dashboard.src.health import HealthWriter
    from dashboard.src.sink import ChartSink
    from dashboard.src.upstream import UpstreamClient

    settings = DashboardSettings()
    log_config_summary(settings)

    sink = ChartSink()
    pipeline = RefreshPipeline(
        client=UpstreamClient(
            settings.upstream_base_url,
            access_token=settings.access_token,
            api_key=settings.api_key,
            timeout_s=settings.request_timeout_s,
        ),
        sink=sink,
        gauge_max_w=settings.gauge_max_w,
        tz=settings.tz,
    )
    health = HealthWriter(settings.health_path) if settings.health_path else None

    if args.once:
        result = await _refresh_once(pipeline=pipeline, health=health)
        print(json.dumps({"status": str(result.status), **sink.snapshot()}, indent=2))
        return 0 if result.status == CycleStatus.OK else 1

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda: _handle_signal(shutdown_event))

    await refresh_loop(
        pipeline=pipeline,
        refresh_interval_s=settings.refresh_interval_s,
        shutdown_event=shutdown_event,
        health=health,
    )
    return 0


def main() -> None:
    """Synchronous entrypoint for the refresh daemon."""
    sys.exit(asyncio.run(async_main()))


if __name__ == "__main__":
    main()
