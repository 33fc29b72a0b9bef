"""
Timestamp token signing and verification.

Token format: "<issued_at>.<hex hmac-sha256(secret, str(issued_at))>".

Replay protection is the skew window only; there is no seen-token cache.
The age check is one-directional, so a token dated in the future is not
rejected for that reason.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Callable

from .config import InterlinkConfig
from .models import AuthToken, RejectReason, VerificationResult

MAX_TOKEN_SKEW_SECONDS = 300


def _key(secret: str | bytes) -> bytes:
    return secret if isinstance(secret, bytes) else secret.encode()


def compute_signature(secret: str | bytes, issued_at: int) -> str:
    """Hex HMAC-SHA256 of the decimal timestamp."""
    return hmac.new(_key(secret), str(issued_at).encode(), hashlib.sha256).hexdigest()


def generate_token(secret: str | bytes, now: float | None = None) -> str:
    """
    Mint a fresh serialized token.

    Args:
        secret: Shared secret
        now: Unix time to sign. Defaults to the current time.

    Returns:
        "<issued_at>.<signature>"
    """
    issued_at = int(time.time() if now is None else now)
    return AuthToken(issued_at, compute_signature(secret, issued_at)).serialize()


def verify_token(
    token: str,
    secret: str | bytes,
    max_skew_seconds: int = MAX_TOKEN_SKEW_SECONDS,
    now: float | None = None,
) -> VerificationResult:
    """
    Check a serialized token against the shared secret.

    Returns:
        Authenticated result, or a rejection with AUTH_ERROR (malformed),
        TOKEN_EXPIRED (older than max_skew_seconds) or INVALID_SIGNATURE
    """
    try:
        parsed = AuthToken.parse(token)
    except ValueError as e:
        return VerificationResult.rejected(RejectReason.AUTH_ERROR, f"Authentication failed: {e}")

    current = int(time.time() if now is None else now)
    if current - parsed.issued_at > max_skew_seconds:
        return VerificationResult.rejected(RejectReason.TOKEN_EXPIRED)

    expected = compute_signature(secret, parsed.issued_at)
    if not hmac.compare_digest(expected.encode(), parsed.signature.encode()):
        return VerificationResult.rejected(RejectReason.INVALID_SIGNATURE)

    return VerificationResult.accepted(parsed.issued_at)


class TokenSigner:
    """
    Token signer bound to one secret and clock.

    Args:
        secret: Shared secret
        max_skew_seconds: Maximum accepted token age. Default: 300
        clock: Wall-clock source in Unix seconds. Default: time.time
    """

    def __init__(
        self,
        secret: str | bytes,
        max_skew_seconds: int = MAX_TOKEN_SKEW_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self._secret = secret
        self.max_skew_seconds = max_skew_seconds
        self.clock = clock

    @classmethod
    def from_config(cls, config: InterlinkConfig) -> "TokenSigner":
        return cls(config.shared_secret, max_skew_seconds=config.auth_max_skew_seconds)

    def generate(self) -> str:
        return generate_token(self._secret, now=self.clock())

    def verify(self, token: str) -> VerificationResult:
        return verify_token(token, self._secret, self.max_skew_seconds, now=self.clock())
