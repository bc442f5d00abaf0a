"""Core application middleware utilities.

Imported in app_factory to compose the middleware stack.
"""

from .logging_middleware import LoggingMiddleware
from .rate_limit import limiter

__all__ = ["LoggingMiddleware", "limiter"]
