"""Router exposing the caller's own chat history."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from carecoord.auth.dependencies import get_caller
from carecoord.auth.schemas import Caller
from carecoord.db.chat_messages.repository import ChatMessageRepository
from carecoord.db.chat_messages.schemas import MessageListResponse, MessageResponse
from carecoord.db.constants import TRANSCRIPT_HISTORY_LIMIT
from carecoord.db.dependencies import get_chat_message_repository

router = APIRouter(prefix="/chat/history", tags=["Chat"])


@router.get("", response_model=MessageListResponse)
async def get_chat_history(
    caller: Annotated[Caller, Depends(get_caller)],
    message_repository: Annotated[
        ChatMessageRepository, Depends(get_chat_message_repository)
    ],
    limit: Annotated[int, Query(ge=1, le=200)] = TRANSCRIPT_HISTORY_LIMIT,
) -> MessageListResponse:
    """
    The caller's latest messages, oldest first.

    Anonymous callers (no verifiable identity) get an empty history.
    """
    if caller.user_id is None:
        return MessageListResponse(messages=[], total=0)

    messages = await message_repository.list_recent(limit, user_id=caller.user_id)
    return MessageListResponse(
        messages=[MessageResponse.model_validate(m) for m in messages],
        total=len(messages),
    )
