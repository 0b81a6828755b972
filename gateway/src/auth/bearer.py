"""
Shared-secret bearer authentication for the dashboard gateway.

Parses the accepted access tokens from the ACCESS_TOKENS environment variable
and validates incoming ``Authorization: Bearer {token}`` headers. Uses
constant-time comparison via secrets.compare_digest to prevent timing attacks.

With no token configured the gate is open (development mode): every request is
let through and whatever bearer token it carries is still forwarded upstream.

CHANGELOG:
- 2026-10-19: Open gate when ACCESS_TOKENS is empty (STORY-013)
- 2026-10-19: Initial creation (STORY-013)

TODO:
- None
"""

import logging
import secrets

from fastapi import HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)


def parse_access_tokens(raw: str) -> frozenset[str]:
    """Parse the ACCESS_TOKENS environment variable into a set of secrets.

    Format: "secret1,secret2". Several secrets allow rotation without
    downtime. Whitespace around entries is stripped, empty entries skipped.

    Args:
        raw: The raw comma-separated secret list.

    Returns:
        frozenset[str]: The accepted secrets; empty when none are configured.
    """
    if not raw or not raw.strip():
        return frozenset()
    return frozenset(entry.strip() for entry in raw.split(",") if entry.strip())


def verify_access_token(token: str, tokens: frozenset[str]) -> bool:
    """Check a bearer token against the accepted secrets in constant time.

    Every configured secret is compared, so the timing does not reveal which
    one (if any) matched.

    Args:
        token: The bearer token extracted from the Authorization header.
        tokens: The accepted secrets.

    Returns:
        bool: True if the token matches one of the secrets.
    """
    if not token:
        return False

    matched = False
    for accepted in tokens:
        if secrets.compare_digest(token.encode("utf-8"), accepted.encode("utf-8")):
            matched = True
    return matched


class AccessGate:
    """FastAPI-compatible shared-secret gate.

    Wraps HTTPBearer for OpenAPI documentation and validates the extracted
    token against the configured secrets. Designed to be used with FastAPI's
    Depends() mechanism; the dependency returns the raw token so route
    handlers can forward it upstream.

    Attributes:
        tokens: Accepted secrets; empty means the gate is open.
        scheme: FastAPI HTTPBearer security scheme.
    """

    def __init__(self, tokens: frozenset[str]) -> None:
        self.tokens = tokens
        self.scheme = HTTPBearer(auto_error=False)

    @property
    def is_open(self) -> bool:
        """True when no secret is configured and every request passes."""
        return not self.tokens

    async def verify(self, request: Request) -> str:
        """FastAPI dependency that validates the bearer token.

        Args:
            request: The incoming FastAPI request.

        Returns:
            str: The bearer token, or an empty string when the gate is open
            and the request carries none.

        Raises:
            HTTPException: 401 Unauthorized if the token is missing or invalid
                while the gate is closed.
        """
        credentials: HTTPAuthorizationCredentials | None = await self.scheme(request)

        if self.is_open:
            return credentials.credentials if credentials is not None else ""

        if credentials is None:
            raise HTTPException(
                status_code=401,
                detail="Missing authorization credentials.",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if not verify_access_token(credentials.credentials, self.tokens):
            raise HTTPException(
                status_code=401,
                detail="Invalid or missing access token.",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return credentials.credentials
