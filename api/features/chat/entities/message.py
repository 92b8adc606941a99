"""Message entity: one immutable chat turn."""
from enum import Enum

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import BaseEntity


class SenderRole(str, Enum):
    """Who authored a message."""
    USER = "user"
    AI = "ai"


class Message(BaseEntity):
    """A single message within a conversation."""

    conversation_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("conversation.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender: Mapped[str] = mapped_column(String(10), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        Index("ix_message_conversation_id", "conversation_id"),
        Index("ix_message_created_at", "created_at"),
        CheckConstraint("sender IN ('user', 'ai')", name="ck_message_sender"),
    )
