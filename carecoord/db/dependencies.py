"""
FastAPI dependencies for database repositories.

Provides dependency injection for the per-table repositories. All
repositories resolved within one request share the request's session.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carecoord.db.chat_messages.repository import ChatMessageRepository
from carecoord.db.database import get_db
from carecoord.db.inventory.repository import InventoryRepository
from carecoord.db.schedule.repository import ScheduleRepository


def get_inventory_repository(
    session: AsyncSession = Depends(get_db),
) -> InventoryRepository:
    """
    FastAPI dependency for getting the inventory repository.

    Args:
        session: Database session from get_db dependency

    Returns:
        InventoryRepository: Repository instance with injected session
    """
    return InventoryRepository(session)


def get_schedule_repository(
    session: AsyncSession = Depends(get_db),
) -> ScheduleRepository:
    """
    FastAPI dependency for getting the schedule repository.

    Args:
        session: Database session from get_db dependency

    Returns:
        ScheduleRepository: Repository instance with injected session
    """
    return ScheduleRepository(session)


def get_chat_message_repository(
    session: AsyncSession = Depends(get_db),
) -> ChatMessageRepository:
    """
    FastAPI dependency for getting the chat message repository.

    Args:
        session: Database session from get_db dependency

    Returns:
        ChatMessageRepository: Repository instance with injected session
    """
    return ChatMessageRepository(session)
