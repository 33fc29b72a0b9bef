"""
Interlink authentication middleware for ASGI and WSGI frameworks.

Re-exports middleware classes for convenient imports:
    from mcp_interlink.middleware import InterlinkAuthASGIMiddleware
    from mcp_interlink.middleware import InterlinkAuthWSGIMiddleware
"""

from .wsgi import InterlinkAuthWSGIMiddleware

__all__: list[str] = ["InterlinkAuthWSGIMiddleware"]

# ASGI middleware (FastAPI, Starlette), needs the "asgi" extra
try:
    from .asgi import InterlinkAuthASGIMiddleware
    __all__.append("InterlinkAuthASGIMiddleware")
except ImportError:
    pass
