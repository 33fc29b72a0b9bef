"""
Signed, rate-limited, retried outbound calls to a peer service.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from .config import InterlinkConfig
from .errors import DispatchError, UnexpectedStatusError
from .headers import RETRY_AFTER_HEADER, build_auth_headers, parse_retry_after
from .models import RequestAttempt
from .rate_limit import RateLimiter
from .tokens import TokenSigner

logger = logging.getLogger(__name__)

HEALTH_CHECK_TIMEOUT_S = 5.0


def _error_message(response: httpx.Response) -> Any:
    """Best-effort message from an error response body."""
    try:
        data = response.json()
    except ValueError:
        return response.text or None
    if isinstance(data, dict):
        return data.get("message") or data.get("error") or data
    return data


def _response_payload(response: httpx.Response) -> Any:
    """Decode a 2xx body, unwrapping a {"data": ...} envelope if present."""
    if not response.content:
        return None
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict) and data.get("data"):
        return data["data"]
    return data


class RequestDispatcher:
    """
    Client for calling a peer service with signed requests.

    Every attempt waits for the shared rate limiter, carries a freshly minted
    token and is retried on failure:

    - 2xx: payload is returned
    - 429: waits Retry-After seconds (default 5) and retries without using
      the retry budget
    - 401 and any other failure: waits the fixed retry delay and retries
      while budget remains, then raises DispatchError

    Args:
        config: Interlink configuration
        rate_limiter: Limiter shared with other dispatchers. A private one
            is created from config if omitted.
        signer: Token signer. Created from config if omitted.
        client: httpx.AsyncClient to use. If omitted the dispatcher creates
            and owns one.
        sleep: Coroutine used for retry and Retry-After waits

    Example:
        >>> async with RequestDispatcher(InterlinkConfig.from_env()) as peer:
        ...     results = await peer.dispatch("POST", "/api/search-topics", {"query": "jazz"})
    """

    def __init__(
        self,
        config: InterlinkConfig,
        rate_limiter: RateLimiter | None = None,
        signer: TokenSigner | None = None,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.rate_limiter = rate_limiter or RateLimiter.from_config(config)
        self.signer = signer or TokenSigner.from_config(config)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=config.request_timeout_s)
        self._sleep = sleep

    async def __aenter__(self) -> "RequestDispatcher":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this dispatcher created it."""
        if self._owns_client:
            await self.client.aclose()

    def _resolve_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        return f"{self.config.target_url.rstrip('/')}/{url.lstrip('/')}"

    async def _send(self, attempt: RequestAttempt) -> httpx.Response:
        await self.rate_limiter.acquire()
        headers = build_auth_headers(self.signer.generate())
        attempt.attempts += 1

        if attempt.method == "GET":
            return await self.client.get(
                attempt.url,
                params=attempt.payload,
                headers=headers,
                timeout=self.config.request_timeout_s,
            )
        return await self.client.request(
            attempt.method,
            attempt.url,
            json=attempt.payload,
            headers=headers,
            timeout=self.config.request_timeout_s,
        )

    async def dispatch(
        self,
        method: str,
        url: str,
        payload: Any = None,
        max_retries: int | None = None,
        retry_delay_ms: int | None = None,
    ) -> Any:
        """
        Send a signed request, retrying until success or budget exhaustion.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Absolute URL, or a path relative to config.target_url
            payload: Query params for GET, JSON body for other methods
            max_retries: Retries after the first attempt. Default: config value
            retry_delay_ms: Fixed delay between retries. Default: config value

        Returns:
            Decoded response payload

        Raises:
            DispatchError: If every attempt failed
        """
        attempt = RequestAttempt(
            method=method.upper(),
            url=self._resolve_url(url),
            payload=payload,
            retries_remaining=self.config.max_retries if max_retries is None else max_retries,
        )
        delay_s = (self.config.retry_delay_ms if retry_delay_ms is None else retry_delay_ms) / 1000

        while True:
            try:
                response = await self._send(attempt)
            except httpx.RequestError as e:
                last_error: BaseException = e
            else:
                status = response.status_code
                if 200 <= status < 300:
                    logger.info(
                        f"Successful communication with peer service: {attempt.method} {attempt.url}"
                    )
                    return _response_payload(response)

                if status == 429:
                    retry_after = parse_retry_after(response.headers.get(RETRY_AFTER_HEADER))
                    logger.warning(
                        f"Rate limited by peer service. Retrying after {retry_after} seconds..."
                    )
                    attempt.rate_limit_hold_active = True
                    try:
                        await self._sleep(retry_after)
                    finally:
                        attempt.rate_limit_hold_active = False
                    continue

                details = _error_message(response)
                if status == 401:
                    logger.warning(f"Authentication error with peer service: {details}")
                last_error = UnexpectedStatusError(status, attempt.url, details)

            if attempt.retries_remaining <= 0:
                logger.error(
                    f"Request to {attempt.url} failed after {attempt.attempts} attempts: {last_error}"
                )
                raise DispatchError(attempt.url, attempt.attempts, last_error) from last_error

            logger.warning(
                f"Request to {attempt.url} failed ({last_error}). "
                f"Retrying... ({attempt.retries_remaining} retries left)"
            )
            await self._sleep(delay_s)
            attempt.retries_remaining -= 1

    async def is_available(self) -> bool:
        """Return True if the peer's health endpoint answers 200."""
        url = self._resolve_url(self.config.health_path)
        await self.rate_limiter.acquire()
        try:
            response = await self.client.get(url, timeout=HEALTH_CHECK_TIMEOUT_S)
        except httpx.RequestError as e:
            logger.error(f"Peer service is not available: {e}")
            return False
        return response.status_code == 200
