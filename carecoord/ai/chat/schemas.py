"""Request and response bodies of the chat proxy."""

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Body of POST /chat."""

    message: str = Field(..., description="The user's new message")


class ChatResponse(BaseModel):
    """Successful reply."""

    response: str = Field(..., description="Assistant reply text")


class ChatErrorResponse(BaseModel):
    """Error envelope used for every non-2xx chat response."""

    error: str = Field(..., description="Human-readable error description")
