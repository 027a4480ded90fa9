"""Request ID middleware for request tracing."""

import logging
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    ASGI middleware for request ID tracking.

    If X-Request-ID header is present, uses it. Otherwise generates UUID4.
    Adds X-Request-ID to response headers and stores in request.state for logging.

    Usage:
        app.add_middleware(RequestIdMiddleware)
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = request.headers.get(REQUEST_ID_HEADER)

        if not request_id:
            request_id = str(uuid.uuid4())
            logger.debug("request_id_generated: request_id=%s", request_id)
        else:
            logger.debug("request_id_provided: request_id=%s", request_id)

        request.state.request_id = request_id

        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        return response
