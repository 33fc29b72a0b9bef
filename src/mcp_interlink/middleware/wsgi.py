"""
WSGI middleware for interlink authentication (Flask and other WSGI apps).
"""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable

from ..config import DEFAULT_HEALTH_PATH
from ..tokens import MAX_TOKEN_SKEW_SECONDS, TokenSigner
from ..verifier import AuthVerifier

ENVIRON_KEY = "interlink.auth"


def _extract_headers(environ: dict[str, Any]) -> dict[str, str]:
    """Extract HTTP headers from WSGI environ."""
    headers: dict[str, str] = {}
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            # HTTP_AUTHORIZATION -> authorization
            header_name = key[5:].replace("_", "-").lower()
            headers[header_name] = value
    return headers


def is_skipped_path(path: str, skip_paths: Iterable[str]) -> bool:
    """
    Check whether a path is one of the skipped paths or lies beneath one.

    Examples:
        >>> is_skipped_path("/api/health/live", ("/api/health",))
        True
        >>> is_skipped_path("/api/healthz-admin", ("/api/health",))
        False
    """
    for prefix in skip_paths:
        if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
            return True
    return False


class InterlinkAuthWSGIMiddleware:
    """
    WSGI middleware that authenticates server-to-server requests.

    Accepted requests carry the VerificationResult in
    `environ["interlink.auth"]`; rejected ones get a JSON 401.

    Args:
        app: WSGI application
        shared_secret: Secret shared with calling services
        max_skew_seconds: Maximum accepted token age. Default: 300
        skip_paths: Paths (and their sub-paths) served without authentication
        verifier: Prebuilt AuthVerifier, overrides shared_secret/max_skew_seconds

    Example (Flask):
        >>> app = Flask(__name__)
        >>> app.wsgi_app = InterlinkAuthWSGIMiddleware(
        ...     app.wsgi_app, shared_secret=config.shared_secret
        ... )
    """

    def __init__(
        self,
        app: Callable[..., Iterable[bytes]],
        shared_secret: str | bytes | None = None,
        max_skew_seconds: int = MAX_TOKEN_SKEW_SECONDS,
        skip_paths: Iterable[str] = (DEFAULT_HEALTH_PATH,),
        verifier: AuthVerifier | None = None,
    ):
        if verifier is None:
            if not shared_secret:
                raise ValueError("shared_secret or verifier is required")
            verifier = AuthVerifier(TokenSigner(shared_secret, max_skew_seconds=max_skew_seconds))
        self.app = app
        self.verifier = verifier
        self.skip_paths = tuple(skip_paths)

    def __call__(
        self,
        environ: dict[str, Any],
        start_response: Callable[..., Any],
    ) -> Iterable[bytes]:
        path = environ.get("PATH_INFO", "/")
        if is_skipped_path(path, self.skip_paths):
            return self.app(environ, start_response)

        result = self.verifier.authenticate(_extract_headers(environ))
        if not result.authenticated:
            body = json.dumps(result.error_body()).encode("utf-8")
            start_response(
                "401 Unauthorized",
                [
                    ("Content-Type", "application/json"),
                    ("Content-Length", str(len(body))),
                ],
            )
            return [body]

        environ[ENVIRON_KEY] = result
        return self.app(environ, start_response)
