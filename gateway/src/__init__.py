"""
Gateway package for the solar meter dashboard.

FastAPI service that gates the dashboard behind a shared-secret bearer token,
proxies the upstream SMA reader API and serves the rendered dashboard state.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-013)

TODO:
- None
"""
