"""
Authentication package.

Exports the AccessGate dependency class and token parsing utilities
for use by FastAPI route handlers.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-013)

TODO:
- None
"""

from gateway.src.auth.bearer import AccessGate, parse_access_tokens, verify_access_token

__all__ = ["AccessGate", "parse_access_tokens", "verify_access_token"]
