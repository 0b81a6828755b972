"""
Authenticated HTTP client for the upstream SMA reader API.

Every request carries the caller's bearer token in ``Authorization`` and, when
configured, the API secret in ``X-API-Key``. Responses are classified into
three outcomes:

- HTTP 401: :class:`~dashboard.src.errors.AuthenticationError`.
- Network error, timeout, any other HTTP status >= 400, or a body that is not
  a JSON object: :class:`~dashboard.src.errors.TransportError`.
- Otherwise the decoded JSON object is returned.

The client either owns a short-lived ``httpx.AsyncClient`` per request or
reuses one injected by the caller (the gateway shares a single pooled client).
TLS certificate verification is always enabled on owned clients.

CHANGELOG:
- 2026-10-20: Leave the resource prefix to the caller via TransportError.path (STORY-018)
- 2026-10-19: Accept an injected AsyncClient for the gateway (STORY-009)
- 2026-10-19: Initial creation (STORY-005)

TODO:
- None
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from dashboard.src.errors import AuthenticationError, TransportError

logger = logging.getLogger(__name__)

CURRENT_PATH = "/api/current"
CURRENT_AND_MAX_PATH = "/api/current-and-max"
TODAY_PATH = "/api/today"
YEARLY_PATH = "/api/yearly-yield"

_DEFAULT_TIMEOUT_S = 10.0


class UpstreamClient:
    """Fetches JSON resources from the upstream telemetry API.

    Args:
        base_url: Upstream base URL, without trailing slash.
        access_token: Bearer token forwarded in ``Authorization``. Empty means
            no header is sent.
        api_key: Optional API secret forwarded as ``X-API-Key: Bearer <key>``.
        timeout_s: Per-request timeout in seconds.
        client: Optional shared ``httpx.AsyncClient``. When ``None`` a new
            client is opened for each request.

    Usage::

        client = UpstreamClient("https://sma.example.com", access_token="tok")
        payload = await client.fetch_json(CURRENT_PATH)
    """

    def __init__(
        self,
        base_url: str,
        *,
        access_token: str = "",
        api_key: str = "",
        timeout_s: float = _DEFAULT_TIMEOUT_S,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._access_token = access_token
        self._api_key = api_key
        self._timeout_s = timeout_s
        self._client = client

    @property
    def base_url(self) -> str:
        return self._base_url

    def headers(self) -> dict[str, str]:
        """Headers forwarded on every upstream request."""
        headers = {"Accept": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        if self._api_key:
            headers["X-API-Key"] = f"Bearer {self._api_key}"
        return headers

    async def fetch_json(self, path: str) -> dict[str, Any]:
        """GET ``{base_url}{path}`` and return the decoded JSON object.

        Args:
            path: Resource path, e.g. :data:`CURRENT_PATH`.

        Returns:
            dict: The decoded response body.

        Raises:
            AuthenticationError: Upstream answered 401.
            TransportError: Network failure, timeout, HTTP error status, or a
                body that is not a JSON object.
        """
        url = f"{self._base_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.get(
                    url, headers=self.headers(), timeout=self._timeout_s
                )
            else:
                async with httpx.AsyncClient(verify=True, timeout=self._timeout_s) as client:
                    response = await client.get(url, headers=self.headers())
        except httpx.HTTPError as exc:
            logger.warning("Upstream request to %s failed: %s", path, exc)
            raise TransportError(type(exc).__name__, path=path) from exc

        if response.status_code == 401:
            raise AuthenticationError("Unauthorized: Invalid API credentials")

        if response.status_code >= 400:
            logger.warning("Upstream %s answered HTTP %d", path, response.status_code)
            raise TransportError(f"HTTP {response.status_code}", path=path)

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError("response is not JSON", path=path) from exc

        if not isinstance(payload, dict):
            raise TransportError("response is not a JSON object", path=path)
        return payload
