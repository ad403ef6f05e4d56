"""
Pydantic schemas for chat history reads.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from carecoord.db.chat_messages.model import ChatRole


class MessageResponse(BaseModel):
    """Response model for a single persisted message."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Message UUID")
    role: ChatRole = Field(..., description="Message role")
    content: str = Field(..., description="Message text")
    created_at: datetime = Field(..., description="When the message was created")


class MessageListResponse(BaseModel):
    """Response model for a list of messages."""

    messages: list[MessageResponse] = Field(..., description="Messages, oldest first")
    total: int = Field(..., description="Total number of messages")
