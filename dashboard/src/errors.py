"""
Error taxonomy for the refresh pipeline.

Only failures that affect a whole upstream call are exceptions. Malformed
individual records are dropped or zero-substituted by the normalizers, and an
empty series is signalled with :class:`~dashboard.src.models.NoData`.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-005)

TODO:
- None
"""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for pipeline errors."""


class AuthenticationError(DashboardError):
    """Upstream rejected the forwarded credential (HTTP 401).

    All three upstream calls share one credential, so a single 401 aborts the
    whole refresh cycle.
    """


class TransportError(DashboardError):
    """Upstream call failed: network error, timeout, HTTP error or non-JSON body.

    Attributes:
        path: Upstream path that failed.
    """

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(message)
        self.path = path
