"""API request/response schemas."""

from agent_chat.api.schemas.chat import ChatRequest
from agent_chat.api.schemas.common import ErrorResponse, HealthResponse, ServiceStatus

__all__ = [
    # Common
    "ErrorResponse",
    "ServiceStatus",
    "HealthResponse",
    # Chat
    "ChatRequest",
]
