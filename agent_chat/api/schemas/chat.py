"""Chat endpoint schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Send a message to an agent.

    ``message`` is optional at the schema level so that a missing or blank
    message is reported as "Message is required" rather than a generic
    validation error.

    Args:
        message: User's message text
        conversation_id: Conversation to continue (``conversationId`` in JSON);
            omitted to start a new one
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: Optional[str] = None
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
