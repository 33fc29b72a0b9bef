"""
Interlink configuration.

Built once at process start and passed to each component's constructor.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SHARED_SECRET = "default_secret_change_in_production"
DEFAULT_TARGET_URL = "http://localhost:3002"
DEFAULT_HEALTH_PATH = "/api/health"


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


@dataclass(frozen=True)
class InterlinkConfig:
    """
    Settings shared by the signer, rate limiter, dispatcher and verifier.

    Attributes:
        shared_secret: HMAC key, identical on both communicating services
        target_url: Base URL of the peer service
        request_timeout_ms: Per-call HTTP timeout
        max_retries: Retries after the first attempt (429 holds excluded)
        retry_delay_ms: Fixed delay between retries
        max_requests_per_second: Outbound request ceiling per 1s window
        auth_max_skew_seconds: Maximum token age accepted by the verifier
        health_path: Peer health endpoint used by availability checks
    """
    shared_secret: str = field(default=DEFAULT_SHARED_SECRET, repr=False)
    target_url: str = DEFAULT_TARGET_URL
    request_timeout_ms: int = 30000
    max_retries: int = 3
    retry_delay_ms: int = 1000
    max_requests_per_second: int = 5
    auth_max_skew_seconds: int = 300
    health_path: str = DEFAULT_HEALTH_PATH

    def __post_init__(self) -> None:
        if not self.shared_secret:
            raise ConfigError("shared_secret must not be empty")
        if self.max_requests_per_second < 1:
            raise ConfigError("max_requests_per_second must be at least 1")
        if self.request_timeout_ms < 1:
            raise ConfigError("request_timeout_ms must be at least 1")
        if self.max_retries < 0 or self.retry_delay_ms < 0:
            raise ConfigError("max_retries and retry_delay_ms must not be negative")

    @property
    def request_timeout_s(self) -> float:
        return self.request_timeout_ms / 1000

    @property
    def retry_delay_s(self) -> float:
        return self.retry_delay_ms / 1000

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "InterlinkConfig":
        """
        Read configuration from environment variables.

        Args:
            env: Mapping to read from. Defaults to os.environ.

        Raises:
            ConfigError: If a numeric variable is malformed or out of range
        """
        if env is None:
            env = os.environ

        secret = env.get("SHARED_SECRET") or DEFAULT_SHARED_SECRET
        if secret == DEFAULT_SHARED_SECRET:
            logger.warning("SHARED_SECRET not set, using the default secret")

        return cls(
            shared_secret=secret,
            target_url=(env.get("PEER_SERVER_URL") or DEFAULT_TARGET_URL).rstrip("/"),
            request_timeout_ms=_int_setting(env, "REQUEST_TIMEOUT", 30000),
            max_retries=_int_setting(env, "MAX_RETRIES", 3),
            retry_delay_ms=_int_setting(env, "RETRY_DELAY", 1000),
            max_requests_per_second=_int_setting(env, "MAX_REQUESTS_PER_SECOND", 5),
            auth_max_skew_seconds=_int_setting(env, "AUTH_MAX_SKEW_SECONDS", 300),
            health_path=env.get("PEER_HEALTH_PATH") or DEFAULT_HEALTH_PATH,
        )
