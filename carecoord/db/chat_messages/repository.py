"""
Repository for chat message database operations.

Provides append and history reads for ChatMessage records using SQLAlchemy
async sessions.
"""

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from carecoord.db.chat_messages.model import ChatMessage, ChatRole
from carecoord.utils.logger import logger


class ChatMessageRepository:
    """Repository for the append-only chat_messages log."""

    def __init__(self, session: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def append_message(
        self,
        role: ChatRole,
        content: str,
        user_id: str | None = None,
    ) -> ChatMessage:
        """
        Append a message to the log and commit it on its own.

        Each call is its own transaction, so a failure between two calls
        leaves the first row in place.

        Args:
            role: Message role
            content: Message text
            user_id: Caller identity, if known

        Returns:
            ChatMessage: The persisted message
        """
        message = ChatMessage(user_id=user_id, role=role.value, content=content)

        self.session.add(message)
        await self.session.flush()
        await self.session.refresh(message)
        await self.session.commit()

        logger.info(
            f"[ChatMessageRepository] Appended message: id={message.id}, role={role.value}"
        )
        return message

    async def list_recent(
        self,
        limit: int,
        user_id: str | None = None,
    ) -> list[ChatMessage]:
        """
        Get the latest messages, optionally for a single user.

        Args:
            limit: Maximum number of messages
            user_id: Restrict to this user's messages when given

        Returns:
            list[ChatMessage]: Up to ``limit`` most recent messages, oldest first
        """
        stmt = select(ChatMessage)
        if user_id is not None:
            stmt = stmt.where(ChatMessage.user_id == user_id)
        stmt = stmt.order_by(desc(ChatMessage.created_at)).limit(limit)

        result = await self.session.execute(stmt)
        messages = list(result.scalars().all())
        messages.reverse()

        logger.debug(
            f"[ChatMessageRepository] Retrieved {len(messages)} messages",
            user_id=user_id,
        )
        return messages

    async def release(self) -> None:
        """
        End the session's open read transaction so its connection goes back
        to the pool. Loaded rows stay usable since sessions don't expire on commit.
        """
        if self.session.in_transaction():
            await self.session.commit()
