"""Conversation entity: one support chat session."""
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import BaseEntity, utcnow


class Conversation(BaseEntity):
    """A chat session; its id doubles as the client's session token."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    # "metadata" is reserved on declarative classes
    meta: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)

    __table_args__ = (
        Index("ix_conversation_created_at", "created_at"),
    )
