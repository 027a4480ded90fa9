"""API middleware for request/response processing."""

from agent_chat.api.middleware.cors import configure_cors
from agent_chat.api.middleware.error_handler import (
    error_handling_middleware,
    request_validation_exception_handler,
)
from agent_chat.api.middleware.observability import RequestLoggingMiddleware
from agent_chat.api.middleware.request_id import RequestIdMiddleware

__all__ = [
    "configure_cors",
    "error_handling_middleware",
    "request_validation_exception_handler",
    "RequestIdMiddleware",
    "RequestLoggingMiddleware",
]
