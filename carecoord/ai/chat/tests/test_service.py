"""Tests for ChatProxyService."""

import datetime

import pytest

from carecoord.ai.base import PromptRole
from carecoord.ai.chat.service import ChatProxyService
from carecoord.ai.openai.exceptions import (
    OpenAIConfigurationError,
    OpenAIRateLimitError,
)
from carecoord.db.chat_messages.model import ChatRole
from carecoord.db.schedule.model import ServiceStatus
from carecoord.testing import (
    FakeChatMessageRepository,
    FakeInventoryRepository,
    FakeProvider,
    FakeScheduleRepository,
    make_event,
    make_item,
)

NOW = datetime.datetime(2025, 3, 1, 15, 0, tzinfo=datetime.UTC)


@pytest.fixture
def messages():
    return FakeChatMessageRepository()


@pytest.fixture
def provider():
    return FakeProvider(reply="You have 5 kg of rice left.")


@pytest.fixture
def service(messages, provider):
    inventory = FakeInventoryRepository([make_item("Rice", 5, 10)])
    schedule = FakeScheduleRepository(
        [
            make_event(date=NOW.date(), time=datetime.time(18, 0)),
            make_event(
                date=NOW.date() - datetime.timedelta(days=7),
                status=ServiceStatus.COMPLETED,
                attendance=35,
            ),
        ]
    )
    return ChatProxyService(
        inventory_repository=inventory,
        schedule_repository=schedule,
        message_repository=messages,
        provider=provider,
    )


@pytest.mark.asyncio
async def test_reply_persists_user_then_assistant(service, messages):
    reply = await service.reply("How much rice?", user_id="user-1", now=NOW)

    assert reply == "You have 5 kg of rice left."
    assert [(m.role, m.content, m.user_id) for m in messages.messages] == [
        (ChatRole.USER.value, "How much rice?", "user-1"),
        (ChatRole.ASSISTANT.value, reply, "user-1"),
    ]


@pytest.mark.asyncio
async def test_prompt_is_grounded_in_current_data(service, provider):
    await service.reply("Any service today?", now=NOW)

    [(conversation, model)] = provider.calls
    system_prompt = conversation[0].content

    assert conversation[0].role is PromptRole.SYSTEM
    assert "Rice: 5 kg (LOW STOCK" in system_prompt
    assert "3.0 hours remaining" in system_prompt
    assert "35 people attended" in system_prompt
    assert conversation[-1].content == "Any service today?"
    assert model == "google/gemini-2.5-flash"


@pytest.mark.asyncio
async def test_history_is_forwarded_in_order(service, messages, provider):
    await service.reply("First question", now=NOW)
    await service.reply("Second question", now=NOW)

    conversation, _ = provider.calls[-1]

    assert [m.content for m in conversation[1:]] == [
        "First question",
        "You have 5 kg of rice left.",
        "Second question",
    ]


@pytest.mark.asyncio
async def test_provider_failure_persists_nothing(messages):
    service = ChatProxyService(
        inventory_repository=FakeInventoryRepository(),
        schedule_repository=FakeScheduleRepository(),
        message_repository=messages,
        provider=FakeProvider(error=OpenAIRateLimitError("Rate limit exceeded")),
    )

    with pytest.raises(OpenAIRateLimitError):
        await service.reply("hello", now=NOW)

    assert messages.messages == []


@pytest.mark.asyncio
async def test_failure_between_inserts_keeps_user_row(provider):
    messages = FakeChatMessageRepository(fail_on_append=2)
    service = ChatProxyService(
        inventory_repository=FakeInventoryRepository(),
        schedule_repository=FakeScheduleRepository(),
        message_repository=messages,
        provider=provider,
    )

    with pytest.raises(RuntimeError):
        await service.reply("hello", now=NOW)

    assert [m.role for m in messages.messages] == [ChatRole.USER.value]


@pytest.mark.asyncio
async def test_missing_api_key(service, provider, monkeypatch):
    monkeypatch.delenv("LLM_API_KEY")

    with pytest.raises(OpenAIConfigurationError, match="LLM_API_KEY is not configured"):
        await service.reply("hello", now=NOW)

    assert provider.calls == []


@pytest.mark.asyncio
async def test_read_transaction_is_closed_during_provider_call(messages):
    transaction_open = []

    class RecordingProvider(FakeProvider):
        async def complete_chat(self, conversation, model=None):
            transaction_open.append(messages.in_transaction)
            return await super().complete_chat(conversation, model)

    service = ChatProxyService(
        inventory_repository=FakeInventoryRepository(),
        schedule_repository=FakeScheduleRepository(),
        message_repository=messages,
        provider=RecordingProvider(),
    )

    await service.reply("hello", now=NOW)

    assert transaction_open == [False]
