"""
ASGI middleware for interlink authentication (FastAPI/Starlette).
"""

from typing import Any, Callable, Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..config import DEFAULT_HEALTH_PATH
from ..tokens import MAX_TOKEN_SKEW_SECONDS, TokenSigner
from ..verifier import AuthVerifier
from .wsgi import is_skipped_path


class InterlinkAuthASGIMiddleware(BaseHTTPMiddleware):
    """
    ASGI middleware that authenticates server-to-server requests.

    Rejected requests get a 401 with body
    {"success": false, "message": ..., "error": <reason code>}.
    Accepted requests carry the VerificationResult on
    `request.state.interlink`.

    Args:
        app: ASGI application
        shared_secret: Secret shared with calling services
        max_skew_seconds: Maximum accepted token age. Default: 300
        skip_paths: Paths (and their sub-paths) served without authentication
        verifier: Prebuilt AuthVerifier, overrides shared_secret/max_skew_seconds

    Example (FastAPI):
        >>> app = FastAPI()
        >>> app.add_middleware(
        ...     InterlinkAuthASGIMiddleware,
        ...     shared_secret=config.shared_secret,
        ... )
    """

    def __init__(
        self,
        app: Any,
        shared_secret: str | bytes | None = None,
        max_skew_seconds: int = MAX_TOKEN_SKEW_SECONDS,
        skip_paths: Iterable[str] = (DEFAULT_HEALTH_PATH,),
        verifier: AuthVerifier | None = None,
    ):
        super().__init__(app)
        if verifier is None:
            if not shared_secret:
                raise ValueError("shared_secret or verifier is required")
            verifier = AuthVerifier(TokenSigner(shared_secret, max_skew_seconds=max_skew_seconds))
        self.verifier = verifier
        self.skip_paths = tuple(skip_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        if is_skipped_path(request.url.path, self.skip_paths):
            return await call_next(request)

        result = self.verifier.authenticate(request.headers)
        if not result.authenticated:
            return JSONResponse(status_code=401, content=result.error_body())

        request.state.interlink = result
        return await call_next(request)
