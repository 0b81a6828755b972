"""
Health file writer for the refresh daemon.

Writes a JSON health file with four fields:
- last_cycle_ts: ISO timestamp of the most recent refresh cycle.
- last_success_ts: ISO timestamp of the most recent fully successful cycle.
- last_status: Status of the most recent cycle (ok, auth_error, error).
- consecutive_failures: Number of non-ok cycles since the last success.

The file is rewritten after every cycle, giving Docker HEALTHCHECK or
monitoring a simple liveness signal.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-011)

TODO:
- None
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

from dashboard.src.pipeline import CycleResult, CycleStatus


class HealthWriter:
    """Writes refresh daemon health status to a JSON file.

    Args:
        path: Filesystem path for the health JSON file. Accepts str or Path.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._last_cycle_ts: str | None = None
        self._last_success_ts: str | None = None
        self._last_status: str | None = None
        self._consecutive_failures: int = 0

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def record_cycle(self, result: CycleResult) -> None:
        """Record the outcome of a refresh cycle and write the health file.

        Args:
            result: The cycle result returned by the pipeline.
        """
        now = datetime.now(tz=UTC).isoformat()
        self._last_cycle_ts = now
        self._last_status = str(result.status)
        if result.status == CycleStatus.OK:
            self._last_success_ts = now
            self._consecutive_failures = 0
        else:
            self._consecutive_failures += 1
        self._write()

    def _write(self) -> None:
        """Write the health JSON file with current state."""
        data = {
            "last_cycle_ts": self._last_cycle_ts,
            "last_success_ts": self._last_success_ts,
            "last_status": self._last_status,
            "consecutive_failures": self._consecutive_failures,
        }
        self.path.write_text(json.dumps(data))
