"""
SQLAlchemy model for the assistant conversation log.

The log is append-only: the chat proxy inserts a user row and an assistant
row per exchange and nothing in this service updates or deletes them.
"""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import DateTime, Index, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from carecoord.db.constants import Table
from carecoord.db.database import Base


class ChatRole(str, Enum):
    """Who authored a persisted chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(Base):
    """A single persisted chat message."""

    __tablename__ = Table.CHAT_MESSAGES.value

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
        comment="Message UUID",
    )

    user_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
        comment="Caller identity (JWT sub) when known",
    )

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Message role: user or assistant",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Message text",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        comment="Record creation timestamp",
    )

    __table_args__ = (
        Index("idx_chat_messages_created", "created_at"),
        Index("idx_chat_messages_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ChatMessage(id={self.id}, user_id={self.user_id}, "
            f"role={self.role}, created_at={self.created_at})>"
        )
