"""
Chat proxy service.

Per request: read inventory, schedule and recent history, build the system
prompt, ask the model, then append the user message and the reply to the
chat log.
"""

from datetime import datetime

from carecoord.ai.base import AIProvider
from carecoord.ai.chat.context import build_conversation, build_system_prompt
from carecoord.ai.openai.config import get_openai_settings
from carecoord.ai.openai.exceptions import OpenAIConfigurationError
from carecoord.ai.providers.factory import create_ai_provider
from carecoord.config import AppSettings, get_app_settings
from carecoord.db.chat_messages.model import ChatRole
from carecoord.db.chat_messages.repository import ChatMessageRepository
from carecoord.db.chat_messages.schemas import MessageResponse
from carecoord.db.constants import (
    COMPLETED_SERVICE_LIMIT,
    CONTEXT_HISTORY_LIMIT,
    UPCOMING_SERVICE_LIMIT,
)
from carecoord.db.inventory.repository import InventoryRepository
from carecoord.db.inventory.schemas import InventoryItemResponse
from carecoord.db.schedule.repository import ScheduleRepository
from carecoord.db.schedule.schemas import ScheduleEventResponse
from carecoord.utils.clock import local_now
from carecoord.utils.logger import logger


class ChatProxyService:
    """Grounded chat completions for the dashboard assistant."""

    def __init__(
        self,
        inventory_repository: InventoryRepository,
        schedule_repository: ScheduleRepository,
        message_repository: ChatMessageRepository,
        provider: AIProvider | None = None,
        app_settings: AppSettings | None = None,
    ):
        """
        Args:
            inventory_repository: Inventory reads
            schedule_repository: Schedule reads
            message_repository: Chat log reads and appends
            provider: Completion backend; built from the environment per request when None
            app_settings: Persona and timezone settings
        """
        self.inventory_repository = inventory_repository
        self.schedule_repository = schedule_repository
        self.message_repository = message_repository
        self.provider = provider
        self.app_settings = app_settings or get_app_settings()

    def _resolve_model(self) -> str:
        settings = get_openai_settings()
        if not settings.api_key:
            raise OpenAIConfigurationError("LLM_API_KEY is not configured")
        return settings.model_name

    async def build_prompt(self, now: datetime) -> tuple[str, list[MessageResponse]]:
        """
        Read the grounding data and render the system prompt.

        Returns:
            tuple: (system prompt, recent history oldest first)
        """
        # One session per request: queries run one after another.
        inventory = await self.inventory_repository.list_items()
        upcoming = await self.schedule_repository.list_upcoming(
            now.date(), limit=UPCOMING_SERVICE_LIMIT
        )
        past_services = await self.schedule_repository.list_completed(
            limit=COMPLETED_SERVICE_LIMIT
        )
        history = await self.message_repository.list_recent(CONTEXT_HISTORY_LIMIT)

        system_prompt = build_system_prompt(
            inventory=[InventoryItemResponse.model_validate(i) for i in inventory],
            upcoming=[ScheduleEventResponse.model_validate(e) for e in upcoming],
            past_services=[
                ScheduleEventResponse.model_validate(e) for e in past_services
            ],
            now=now,
            organization_name=self.app_settings.organization_name,
            organization_mission=self.app_settings.organization_mission,
            languages=self.app_settings.supported_languages,
        )
        return system_prompt, [MessageResponse.model_validate(m) for m in history]

    async def reply(
        self,
        message: str,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> str:
        """
        Answer ``message`` and persist the exchange.

        Args:
            message: The user's new message
            user_id: Caller identity recorded on both persisted rows
            now: Current time; the configured timezone's clock when None

        Returns:
            str: Assistant reply

        Raises:
            OpenAIConfigurationError: LLM_API_KEY is missing
            OpenAIRateLimitError: Provider answered 429
            OpenAIPaymentRequiredError: Provider answered 402
            OpenAIContentGenerationError: Any other provider failure
        """
        model_name = self._resolve_model()
        now = now or local_now()

        system_prompt, history = await self.build_prompt(now)
        # Don't hold a pooled connection idle in transaction across the model call.
        await self.message_repository.release()
        conversation = build_conversation(system_prompt, history, message)

        logger.info(
            "Forwarding chat to provider",
            user_id=user_id,
            history_count=len(history),
            model=model_name,
        )
        if self.provider is not None:
            result = await self.provider.complete_chat(conversation, model=model_name)
        else:
            provider = create_ai_provider()
            try:
                result = await provider.complete_chat(conversation, model=model_name)
            finally:
                await provider.close()

        # Two separate commits: a failure in between leaves the user row alone.
        await self.message_repository.append_message(ChatRole.USER, message, user_id)
        await self.message_repository.append_message(
            ChatRole.ASSISTANT, result.text, user_id
        )
        return result.text
