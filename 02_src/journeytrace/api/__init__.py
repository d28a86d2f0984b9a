"""HTTP API module."""

from .app import create_fastapi_app, get_app
from .middleware import BrowserCorrelationMiddleware

__all__ = ["BrowserCorrelationMiddleware", "create_fastapi_app", "get_app"]
