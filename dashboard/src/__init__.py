"""
Dashboard pipeline package for the solar meter dashboard.

Fetches current, daily and yearly telemetry from the upstream SMA reader API,
normalizes the loosely-shaped records and renders chart-ready series into a
rendering sink.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-001)

TODO:
- None
"""
