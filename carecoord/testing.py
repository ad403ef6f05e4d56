"""In-memory stand-ins for the data layer and the completion provider, used by tests."""

import datetime
import uuid

from carecoord.ai.base import AIProvider, ContentGenerationResult, PromptMessage
from carecoord.db.changes.feed import ChangeFeed
from carecoord.db.chat_messages.model import ChatMessage, ChatRole
from carecoord.db.inventory.model import InventoryItem
from carecoord.db.inventory.schemas import InventoryItemResponse
from carecoord.db.schedule.model import ScheduleEvent, ServiceStatus
from carecoord.db.schedule.schemas import ScheduleEventResponse

BASE_TIME = datetime.datetime(2025, 3, 1, 12, 0, tzinfo=datetime.UTC)


# ========== Row builders ==========


def make_item(
    name: str,
    quantity: float,
    low_stock_threshold: float,
    unit: str = "kg",
    category: str = "food",
) -> InventoryItem:
    return InventoryItem(
        id=str(uuid.uuid4()),
        name=name,
        category=category,
        quantity=quantity,
        unit=unit,
        low_stock_threshold=low_stock_threshold,
    )


def make_event(
    date: datetime.date,
    time: datetime.time = datetime.time(18, 0),
    location: str = "Plaza Central",
    status: ServiceStatus = ServiceStatus.SCHEDULED,
    attendance: int | None = None,
    notes: str | None = None,
) -> ScheduleEvent:
    return ScheduleEvent(
        id=str(uuid.uuid4()),
        date=date,
        time=time,
        location=location,
        notes=notes,
        status=status.value,
        attendance=attendance,
    )


# ========== Repository fakes ==========


class FakeInventoryRepository:
    def __init__(self, items: list[InventoryItem] | None = None):
        self.items = items or []

    async def list_items(self) -> list[InventoryItem]:
        return sorted(self.items, key=lambda item: item.name)


class FakeScheduleRepository:
    def __init__(self, events: list[ScheduleEvent] | None = None):
        self.events = events or []

    async def list_upcoming(
        self, today: datetime.date, limit: int | None = None
    ) -> list[ScheduleEvent]:
        events = sorted(
            (e for e in self.events if e.date >= today), key=lambda e: (e.date, e.time)
        )
        return events[:limit] if limit is not None else events

    async def list_completed(self, limit: int | None = None) -> list[ScheduleEvent]:
        events = sorted(
            (
                e
                for e in self.events
                if e.status == ServiceStatus.COMPLETED.value and e.attendance is not None
            ),
            key=lambda e: (e.date, e.time),
            reverse=True,
        )
        return events[:limit] if limit is not None else events


class FakeChatMessageRepository:
    """Append-only in-memory chat log."""

    def __init__(self, fail_on_append: int | None = None):
        self.messages: list[ChatMessage] = []
        self.fail_on_append = fail_on_append
        self.in_transaction = False
        self._appends = 0

    async def release(self) -> None:
        self.in_transaction = False

    async def append_message(
        self, role: ChatRole, content: str, user_id: str | None = None
    ) -> ChatMessage:
        self._appends += 1
        if self.fail_on_append == self._appends:
            raise RuntimeError("insert failed")
        message = ChatMessage(
            id=str(uuid.uuid4()),
            user_id=user_id,
            role=role.value,
            content=content,
            created_at=BASE_TIME + datetime.timedelta(seconds=len(self.messages)),
        )
        self.messages.append(message)
        return message

    async def list_recent(
        self, limit: int, user_id: str | None = None
    ) -> list[ChatMessage]:
        # Reads autobegin a transaction like a real session does.
        self.in_transaction = True
        messages = [
            m for m in self.messages if user_id is None or m.user_id == user_id
        ]
        return messages[-limit:]


class FakeProvider(AIProvider):
    """Records conversations and answers with a canned reply or error."""

    def __init__(self, reply: str = "Hello from the assistant", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[list[PromptMessage], str | None]] = []

    async def complete_chat(
        self, messages: list[PromptMessage], model: str | None = None
    ) -> ContentGenerationResult:
        self.calls.append((messages, model))
        if self.error is not None:
            raise self.error
        return ContentGenerationResult(text=self.reply, model=model, finish_reason="stop")


# ========== View data source fake ==========


class FakeDataSource:
    """DashboardDataSource over plain lists and a real ChangeFeed."""

    def __init__(
        self,
        items: list[InventoryItem] | None = None,
        events: list[ScheduleEvent] | None = None,
        today: datetime.date = BASE_TIME.date(),
    ):
        self.inventory = FakeInventoryRepository(items)
        self.schedule = FakeScheduleRepository(events)
        self.today = today
        self.feed = ChangeFeed()
        self.fail = False
        self.fetch_count = 0

    def _check(self) -> None:
        self.fetch_count += 1
        if self.fail:
            raise ConnectionError("database unavailable")

    async def list_inventory(self) -> list[InventoryItemResponse]:
        self._check()
        items = await self.inventory.list_items()
        return [InventoryItemResponse.model_validate(i) for i in items]

    async def list_upcoming(self, limit: int | None = None) -> list[ScheduleEventResponse]:
        self._check()
        events = await self.schedule.list_upcoming(self.today, limit=limit)
        return [ScheduleEventResponse.model_validate(e) for e in events]

    async def list_completed(self, limit: int | None = None) -> list[ScheduleEventResponse]:
        self._check()
        events = await self.schedule.list_completed(limit=limit)
        return [ScheduleEventResponse.model_validate(e) for e in events]

    def subscribe(self, table, callback):
        return self.feed.subscribe(table, callback)
