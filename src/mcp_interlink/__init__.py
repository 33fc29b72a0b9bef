"""
mcp-interlink

Authenticated, rate-limited and retried request/response calls between
backend services, with HMAC timestamp tokens.
"""

from .config import InterlinkConfig
from .dispatcher import RequestDispatcher
from .errors import ConfigError, DispatchError, InterlinkError, UnexpectedStatusError
from .models import AuthToken, RejectReason, RequestAttempt, VerificationResult
from .rate_limit import RateLimiter
from .tokens import TokenSigner, generate_token, verify_token
from .verifier import AuthVerifier
from .middleware.wsgi import InterlinkAuthWSGIMiddleware

__version__ = "0.1.0"

__all__ = [
    "AuthToken",
    "AuthVerifier",
    "ConfigError",
    "DispatchError",
    "InterlinkAuthWSGIMiddleware",
    "InterlinkConfig",
    "InterlinkError",
    "RateLimiter",
    "RejectReason",
    "RequestAttempt",
    "RequestDispatcher",
    "TokenSigner",
    "UnexpectedStatusError",
    "VerificationResult",
    "generate_token",
    "verify_token",
]

# Middleware imports - optional, require framework dependencies
try:
    from .middleware.asgi import InterlinkAuthASGIMiddleware
    __all__.append("InterlinkAuthASGIMiddleware")
except ImportError:
    pass
