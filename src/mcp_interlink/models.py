"""
Data models for interlink authentication and dispatch.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class RejectReason(str, Enum):
    """Reason codes returned in the 401 body."""
    MISSING_AUTH = "MISSING_AUTH"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    AUTH_ERROR = "AUTH_ERROR"


REJECT_MESSAGES = {
    RejectReason.MISSING_AUTH: "Authentication required",
    RejectReason.TOKEN_EXPIRED: "Token expired",
    RejectReason.INVALID_SIGNATURE: "Invalid authentication",
    RejectReason.AUTH_ERROR: "Authentication failed",
}


@dataclass(frozen=True)
class AuthToken:
    """
    Signed timestamp token.

    Attributes:
        issued_at: Unix epoch seconds at signing time
        signature: Hex HMAC-SHA256 of str(issued_at)
    """
    issued_at: int
    signature: str

    def serialize(self) -> str:
        return f"{self.issued_at}.{self.signature}"

    def __str__(self) -> str:
        return self.serialize()

    @classmethod
    def parse(cls, value: str) -> "AuthToken":
        """
        Parse a "<issued_at>.<signature>" string.

        Raises:
            ValueError: If the value is not exactly two dot-separated parts
                or the timestamp is not a decimal integer
        """
        parts = value.split(".")
        if len(parts) != 2:
            raise ValueError("Token must have exactly two dot-separated parts")
        timestamp, signature = parts
        if not (timestamp.isascii() and timestamp.isdigit()):
            raise ValueError("Token timestamp is not numeric")
        return cls(issued_at=int(timestamp), signature=signature)


@dataclass(frozen=True)
class VerificationResult:
    """
    Outcome of authenticating one inbound request.

    Attributes:
        authenticated: Whether the token was accepted
        reason: Rejection code if not authenticated
        message: Human-readable description of the outcome
        issued_at: Token timestamp when authenticated
    """
    authenticated: bool
    reason: RejectReason | None = None
    message: str | None = None
    issued_at: int | None = None

    @classmethod
    def accepted(cls, issued_at: int) -> "VerificationResult":
        return cls(authenticated=True, message="Authenticated", issued_at=issued_at)

    @classmethod
    def rejected(cls, reason: RejectReason, message: str | None = None) -> "VerificationResult":
        return cls(
            authenticated=False,
            reason=reason,
            message=message or REJECT_MESSAGES[reason],
        )

    def error_body(self) -> dict[str, Any]:
        """JSON body sent with the 401 response."""
        return {
            "success": False,
            "message": self.message or "Authentication failed",
            "error": self.reason.value if self.reason else RejectReason.AUTH_ERROR.value,
        }


@dataclass
class RequestAttempt:
    """
    In-flight state of one dispatch call, mutated across retries.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        url: Absolute request URL
        payload: Query params for GET, JSON body otherwise
        retries_remaining: Retry budget left
        rate_limit_hold_active: True while waiting out a Retry-After
        attempts: HTTP calls issued so far
    """
    method: str
    url: str
    payload: Any = None
    retries_remaining: int = 0
    rate_limit_hold_active: bool = False
    attempts: int = 0
