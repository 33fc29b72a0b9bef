"""
Exceptions raised by the interlink client.
"""

from __future__ import annotations

from typing import Any


class InterlinkError(Exception):
    """Base exception for all inter-service communication errors."""


class ConfigError(InterlinkError):
    """Raised when the interlink configuration is invalid."""


class UnexpectedStatusError(InterlinkError):
    """Raised for a non-2xx response that is not a rate-limit signal."""

    def __init__(self, status_code: int, url: str, details: Any = None):
        self.status_code = status_code
        self.url = url
        self.details = details
        super().__init__(f"HTTP {status_code} from {url}")


class DispatchError(InterlinkError):
    """
    Raised when a dispatch has used up its retry budget.

    Attributes:
        url: Target URL of the failed request
        attempts: Total number of HTTP attempts made
        last_error: The error that ended the final attempt
    """

    def __init__(self, url: str, attempts: int, last_error: BaseException | None = None):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        reason = str(last_error) if last_error is not None else "unknown error"
        super().__init__(
            f"Communication with {url} failed after {attempts} attempts: {reason}"
        )
