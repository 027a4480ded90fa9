"""FastAPI routers for the agent chat API."""

from agent_chat.api.routers.chat import router as chat_router
from agent_chat.api.routers.health import router as health_router

__all__ = [
    "chat_router",
    "health_router",
]
