"""Tests for AuthVerifier."""

import logging

from mcp_interlink import (
    AuthVerifier,
    InterlinkConfig,
    RejectReason,
    TokenSigner,
    generate_token,
)
from mcp_interlink.headers import build_auth_headers

SECRET = "verifier-secret"
T = 1_700_000_000


def make_verifier(now=T, max_skew_seconds=300):
    return AuthVerifier(TokenSigner(SECRET, max_skew_seconds=max_skew_seconds, clock=lambda: now))


class TestAuthVerifier:
    """Tests for AuthVerifier.authenticate."""

    def test_round_trip_with_dispatch_headers(self):
        """Headers built for an outbound call authenticate on the other side."""
        headers = build_auth_headers(generate_token(SECRET))
        verifier = AuthVerifier.from_config(InterlinkConfig(shared_secret=SECRET))

        result = verifier.authenticate(headers)

        assert result.authenticated is True

    def test_missing_header(self):
        """No Authorization header is MISSING_AUTH."""
        result = make_verifier().authenticate({"content-type": "application/json"})
        assert result.reason == RejectReason.MISSING_AUTH

    def test_non_bearer_header(self):
        """Other schemes are MISSING_AUTH."""
        result = make_verifier().authenticate({"Authorization": f"Token {generate_token(SECRET, now=T)}"})
        assert result.reason == RejectReason.MISSING_AUTH

    def test_delegates_expiry(self):
        """Age is checked against the signer's window."""
        headers = build_auth_headers(generate_token(SECRET, now=T))
        result = make_verifier(now=T + 301).authenticate(headers)
        assert result.reason == RejectReason.TOKEN_EXPIRED

    def test_malformed_token(self):
        """A Bearer value that is not a token is AUTH_ERROR."""
        result = make_verifier().authenticate({"authorization": "Bearer not-a-token"})
        assert result.reason == RejectReason.AUTH_ERROR

    def test_error_body(self):
        """Rejections render the structured 401 body."""
        result = make_verifier().authenticate({})
        assert result.error_body() == {
            "success": False,
            "message": "Authentication required",
            "error": "MISSING_AUTH",
        }

    def test_rejection_logged_without_token(self, caplog):
        """Rejections are logged by reason and never include the token."""
        token = generate_token("wrong", now=T)
        with caplog.at_level(logging.WARNING, logger="mcp_interlink.verifier"):
            make_verifier().authenticate({"authorization": f"Bearer {token}"})

        assert "INVALID_SIGNATURE" in caplog.text
        assert token not in caplog.text
