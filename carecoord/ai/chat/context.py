"""
Assembly of the assistant's system prompt from dashboard data.

Everything here is a pure function of its arguments (rows plus the current
time), so the prompt can be built and tested without a database or network.
"""

from collections.abc import Sequence
from datetime import datetime
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel

from carecoord.ai.base import PromptMessage, PromptRole
from carecoord.db.chat_messages.schemas import MessageResponse
from carecoord.db.inventory.schemas import InventoryItemResponse
from carecoord.db.schedule.schemas import ScheduleEventResponse

SYSTEM_PROMPT_FILE = Path(__file__).parent / "system_prompt.md"

NO_PAST_SERVICES = "No past services recorded yet."
NO_SERVICES_TODAY = "No services scheduled for today."
NO_UPCOMING_SERVICES = "No upcoming services scheduled."
NO_INVENTORY = "No inventory recorded."
SERVICE_STARTED = "in progress or completed"


@lru_cache
def load_prompt_template() -> str:
    """Read the system prompt template shipped next to this module."""
    return SYSTEM_PROMPT_FILE.read_text(encoding="utf-8")


class TodayService(BaseModel):
    """A service dated today with the time left until it starts."""

    event: ScheduleEventResponse
    hours_remaining: float

    @property
    def countdown(self) -> str:
        if self.hours_remaining > 0:
            return f"{self.hours_remaining:.1f} hours remaining"
        return SERVICE_STARTED


def hours_until(event: ScheduleEventResponse, now: datetime) -> float:
    """
    Fractional hours from ``now`` until the event starts, clamped at zero.

    The event's date and time are read in ``now``'s timezone.
    """
    starts_at = datetime.combine(event.date, event.time, tzinfo=now.tzinfo)
    return max(0.0, (starts_at - now).total_seconds() / 3600)


def services_today(
    schedule: Sequence[ScheduleEventResponse], now: datetime
) -> list[TodayService]:
    today = now.date()
    return [
        TodayService(event=event, hours_remaining=hours_until(event, now))
        for event in schedule
        if event.date == today
    ]


def _format_quantity(value: float) -> str:
    return f"{value:g}"


def _format_time(event: ScheduleEventResponse) -> str:
    return event.time.strftime("%H:%M")


def format_inventory(items: Sequence[InventoryItemResponse]) -> str:
    if not items:
        return NO_INVENTORY
    lines = []
    for item in items:
        line = f"- {item.name}: {_format_quantity(item.quantity)} {item.unit}"
        if item.is_low_stock:
            line += (
                f" (LOW STOCK, threshold "
                f"{_format_quantity(item.low_stock_threshold)} {item.unit})"
            )
        lines.append(line)
    return "\n".join(lines)


def format_past_services(events: Sequence[ScheduleEventResponse]) -> str:
    lines = [
        f"- {event.date.isoformat()} at {_format_time(event)} in {event.location}: "
        f"{event.recorded_attendance} people attended"
        for event in events
        if event.recorded_attendance is not None
    ]
    return "\n".join(lines) if lines else NO_PAST_SERVICES


def format_today_services(today: Sequence[TodayService]) -> str:
    if not today:
        return NO_SERVICES_TODAY
    lines = [
        f"- TODAY at {_format_time(service.event)} in {service.event.location} "
        f"({service.countdown})"
        for service in today
    ]
    return "TODAY'S SERVICES:\n" + "\n".join(lines)


def format_upcoming_services(events: Sequence[ScheduleEventResponse]) -> str:
    if not events:
        return NO_UPCOMING_SERVICES
    return "\n".join(
        f"- {event.date.isoformat()} at {_format_time(event)} - {event.location} "
        f"({event.status.value})"
        for event in events
    )


def format_language_list(languages: Sequence[str]) -> str:
    if len(languages) == 1:
        return languages[0]
    return ", ".join(languages[:-1]) + f" and {languages[-1]}"


def format_language_rules(languages: Sequence[str]) -> str:
    return " ".join(
        f"If they write in {language}, respond in {language}." for language in languages
    )


def build_system_prompt(
    *,
    inventory: Sequence[InventoryItemResponse],
    upcoming: Sequence[ScheduleEventResponse],
    past_services: Sequence[ScheduleEventResponse],
    now: datetime,
    organization_name: str,
    organization_mission: str,
    languages: Sequence[str],
    template: str | None = None,
) -> str:
    """
    Render the system instruction for one chat request.

    Args:
        inventory: Current inventory, ordered by name
        upcoming: Services from today on, ascending
        past_services: Completed services with attendance, most recent first
        now: Current time in the organization's timezone
        organization_name: Name used in the persona line
        organization_mission: What the organization does
        languages: Languages the assistant mirrors back to the user
        template: Prompt template; the bundled system_prompt.md when None

    Returns:
        str: The complete system prompt
    """
    template = template if template is not None else load_prompt_template()
    return template.format(
        organization_name=organization_name,
        organization_mission=organization_mission,
        language_list=format_language_list(languages),
        language_rules=format_language_rules(languages),
        inventory=format_inventory(inventory),
        past_services=format_past_services(past_services),
        today_services=format_today_services(services_today(upcoming, now)),
        upcoming_services=format_upcoming_services(upcoming),
    ).strip()


def build_conversation(
    system_prompt: str,
    history: Sequence[MessageResponse],
    message: str,
) -> list[PromptMessage]:
    """System instruction, then prior messages in order, then the new user message."""
    return [
        PromptMessage(role=PromptRole.SYSTEM, content=system_prompt),
        *(
            PromptMessage(role=PromptRole(entry.role.value), content=entry.content)
            for entry in history
        ),
        PromptMessage(role=PromptRole.USER, content=message),
    ]
