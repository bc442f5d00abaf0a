"""Logging middleware.

Tags each request with a UUID (echoed back as `X-Request-ID`), binds it into the logging
contextvars together with the client IP, and writes an access-log line with the latency.
"""

import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from filmacademy.core.logging_config import (
    bind_request_context,
    log_request,
    reset_request_context,
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests/responses with timing metadata."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        ip_address = request.client.host if request.client else "unknown"

        tokens = bind_request_context(request_id=request_id, ip_address=ip_address)
        start = time.perf_counter()

        response: Optional[Response] = None
        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            # Auth dependencies stash the resolved user id on request.state.
            user_id = getattr(request.state, "user_id", None)
            log_request(
                method=request.method,
                endpoint=request.url.path,
                status_code=response.status_code if response else 500,
                duration_ms=duration_ms,
                ip_address=ip_address,
                user_id=user_id,
                request_id=request_id,
            )
            reset_request_context(tokens)

        response.headers["X-Request-ID"] = request_id
        return response
