"""
Inbound request authentication.
"""

from __future__ import annotations

import logging
from typing import Mapping

from .config import InterlinkConfig
from .headers import extract_bearer_token
from .models import RejectReason, VerificationResult
from .tokens import TokenSigner

logger = logging.getLogger(__name__)


class AuthVerifier:
    """
    Gate evaluated once per inbound call before any protected handler.

    Args:
        signer: Token signer holding the shared secret and skew window

    Example:
        >>> verifier = AuthVerifier.from_config(InterlinkConfig.from_env())
        >>> result = verifier.authenticate(request.headers)
        >>> if not result.authenticated:
        ...     return JSONResponse(status_code=401, content=result.error_body())
    """

    def __init__(self, signer: TokenSigner):
        self.signer = signer

    @classmethod
    def from_config(cls, config: InterlinkConfig) -> "AuthVerifier":
        return cls(TokenSigner.from_config(config))

    def authenticate(self, headers: Mapping[str, str]) -> VerificationResult:
        """
        Authenticate a request from its headers.

        Args:
            headers: Request headers (names matched case-insensitively)

        Returns:
            Authenticated result, or a rejection with MISSING_AUTH when no
            Bearer token is present, otherwise the signer's verdict
        """
        token = extract_bearer_token(headers)
        if token is None:
            result = VerificationResult.rejected(RejectReason.MISSING_AUTH)
        else:
            result = self.signer.verify(token)

        if not result.authenticated:
            logger.warning(f"Rejected inbound request: {result.reason.value}")
        return result
