"""FastAPI router for the grounded assistant chat endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from carecoord.ai.chat.constants import PAYMENT_REQUIRED_MESSAGE, RATE_LIMIT_MESSAGE
from carecoord.ai.chat.schemas import ChatErrorResponse, ChatRequest, ChatResponse
from carecoord.ai.chat.service import ChatProxyService
from carecoord.ai.openai.exceptions import (
    OpenAIPaymentRequiredError,
    OpenAIRateLimitError,
)
from carecoord.auth.dependencies import get_caller
from carecoord.auth.schemas import Caller
from carecoord.db.chat_messages.repository import ChatMessageRepository
from carecoord.db.dependencies import (
    get_chat_message_repository,
    get_inventory_repository,
    get_schedule_repository,
)
from carecoord.db.inventory.repository import InventoryRepository
from carecoord.db.schedule.repository import ScheduleRepository
from carecoord.utils.logger import logger

router = APIRouter(prefix="/chat", tags=["Chat"])


def get_chat_service(
    inventory_repository: InventoryRepository = Depends(get_inventory_repository),
    schedule_repository: ScheduleRepository = Depends(get_schedule_repository),
    message_repository: ChatMessageRepository = Depends(get_chat_message_repository),
) -> ChatProxyService:
    """
    FastAPI dependency for the chat proxy service.

    Returns:
        ChatProxyService: Service bound to this request's repositories
    """
    return ChatProxyService(
        inventory_repository=inventory_repository,
        schedule_repository=schedule_repository,
        message_repository=message_repository,
    )


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ChatErrorResponse(error=message).model_dump(),
    )


@router.post(
    "",
    response_model=ChatResponse,
    responses={
        status.HTTP_402_PAYMENT_REQUIRED: {"model": ChatErrorResponse},
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": ChatErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ChatErrorResponse},
    },
)
async def chat(
    request: Request,
    caller: Annotated[Caller, Depends(get_caller)],
    chat_service: Annotated[ChatProxyService, Depends(get_chat_service)],
) -> JSONResponse:
    """
    Answer a message using current inventory and schedule as context.

    Body: ``{"message": "..."}``. Every failure is returned as
    ``{"error": "..."}``; nothing is retried.

    Returns:
        JSONResponse: ``{"response": "..."}`` on success
    """
    try:
        chat_request = ChatRequest.model_validate(await request.json())
        logger.info("[USER_INPUT]", user_id=caller.user_id, input=chat_request.message)

        reply = await chat_service.reply(chat_request.message, user_id=caller.user_id)

    except OpenAIRateLimitError:
        return error_response(status.HTTP_429_TOO_MANY_REQUESTS, RATE_LIMIT_MESSAGE)
    except OpenAIPaymentRequiredError:
        return error_response(status.HTTP_402_PAYMENT_REQUIRED, PAYMENT_REQUIRED_MESSAGE)
    except Exception as e:
        logger.exception(
            "Error in chat endpoint", error=str(e), error_type=type(e).__name__
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

    logger.info("[AGENT_OUTPUT]", user_id=caller.user_id, output=reply)
    return JSONResponse(content=ChatResponse(response=reply).model_dump())
