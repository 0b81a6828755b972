"""
Tests for shared-secret bearer authentication (STORY-013).

Validates that the auth module correctly parses ACCESS_TOKENS, validates
bearer tokens using constant-time comparison, and that /auth-check answers
with a plain authenticated flag.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-013)

TODO:
- None
"""

from unittest.mock import patch

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from gateway.src.auth import AccessGate, parse_access_tokens, verify_access_token

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_test_app(tokens: frozenset[str]) -> FastAPI:
    """Create a minimal FastAPI app with a gated GET /protected endpoint."""
    test_app = FastAPI()
    gate = AccessGate(tokens)

    @test_app.get("/protected")
    async def protected(token: str = Depends(gate.verify)) -> dict:
        return {"token": token}

    return test_app


# ---------------------------------------------------------------------------
# Tests for parse_access_tokens()
# ---------------------------------------------------------------------------


class TestParseAccessTokens:
    """Tests for the ACCESS_TOKENS parser."""

    def test_single_token(self) -> None:
        assert parse_access_tokens("alpha") == frozenset({"alpha"})

    def test_multiple_tokens_with_whitespace(self) -> None:
        assert parse_access_tokens(" alpha , beta,,") == frozenset({"alpha", "beta"})

    @pytest.mark.parametrize("raw", ["", "   ", ",,"])
    def test_empty(self, raw: str) -> None:
        assert parse_access_tokens(raw) == frozenset()


# ---------------------------------------------------------------------------
# Tests for verify_access_token()
# ---------------------------------------------------------------------------


class TestVerifyAccessToken:
    """Constant-time token comparison."""

    def test_valid_token(self) -> None:
        assert verify_access_token("beta", frozenset({"alpha", "beta"})) is True

    def test_invalid_token(self) -> None:
        assert verify_access_token("gamma", frozenset({"alpha", "beta"})) is False

    def test_empty_token(self) -> None:
        assert verify_access_token("", frozenset({"alpha"})) is False

    def test_uses_compare_digest(self) -> None:
        with patch(
            "gateway.src.auth.bearer.secrets.compare_digest", return_value=False
        ) as mock_compare:
            verify_access_token("alpha", frozenset({"alpha", "beta"}))
        assert mock_compare.call_count == 2


# ---------------------------------------------------------------------------
# Tests for AccessGate as a dependency
# ---------------------------------------------------------------------------


class TestAccessGate:
    """The gate as a FastAPI dependency."""

    def test_valid_token_returned(self) -> None:
        client = TestClient(_make_test_app(frozenset({"alpha"})))
        response = client.get("/protected", headers={"Authorization": "Bearer alpha"})
        assert response.status_code == 200
        assert response.json() == {"token": "alpha"}

    def test_missing_credentials(self) -> None:
        client = TestClient(_make_test_app(frozenset({"alpha"})))
        response = client.get("/protected")
        assert response.status_code == 401
        assert response.json()["detail"] == "Missing authorization credentials."
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token(self) -> None:
        client = TestClient(_make_test_app(frozenset({"alpha"})))
        response = client.get("/protected", headers={"Authorization": "Bearer wrong"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or missing access token."

    def test_open_gate_passes_through(self) -> None:
        client = TestClient(_make_test_app(frozenset()))
        assert client.get("/protected").json() == {"token": ""}
        response = client.get("/protected", headers={"Authorization": "Bearer upstream-tok"})
        assert response.json() == {"token": "upstream-tok"}


# ---------------------------------------------------------------------------
# Tests for GET /auth-check
# ---------------------------------------------------------------------------


class TestAuthCheckEndpoint:
    """/auth-check answers with a plain flag."""

    def test_authenticated(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.get("/auth-check", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"authenticated": True}

    def test_wrong_token(self, client: TestClient) -> None:
        response = client.get("/auth-check", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json() == {"authenticated": False}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_missing_token(self, client: TestClient) -> None:
        response = client.get("/auth-check")
        assert response.status_code == 401
        assert response.json() == {"authenticated": False}
