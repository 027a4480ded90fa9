"""Observability middleware for request logging."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    ASGI middleware for HTTP request/response logging.

    Logs method, path, status_code, duration_ms, and request_id for every
    request. For streamed chat responses the duration covers the time until
    headers were sent, not the whole body.

    Usage:
        app.add_middleware(RequestLoggingMiddleware)
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = getattr(request.state, "request_id", None)
        start_time = time.time()

        response: Response = await call_next(request)

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "http_request: method=%s path=%s status=%d duration_ms=%d request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request_id,
        )

        return response
