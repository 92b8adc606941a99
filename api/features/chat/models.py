"""Models for the Chat feature."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from api.features.chat.entities.conversation import Conversation as ConversationEntity
from api.features.chat.entities.message import Message as MessageEntity, SenderRole


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class ConversationModel(BaseModel):
    """Domain model for Conversation."""

    id: str = Field(description="Conversation identifier (session token)")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Free-form metadata")

    class Config:
        from_attributes = True

    @classmethod
    def from_entity(cls, entity: ConversationEntity) -> "ConversationModel":
        """Create model from database entity."""
        return cls(
            id=entity.id,
            created_at=_aware(entity.created_at),
            updated_at=_aware(entity.updated_at),
            metadata=entity.meta,
        )


class MessageModel(BaseModel):
    """Domain model for Message."""

    id: str = Field(description="Message identifier")
    conversation_id: str = Field(description="Owning conversation")
    sender: SenderRole = Field(description="Message author")
    text: str = Field(description="Message text")
    created_at: datetime = Field(description="Creation timestamp")

    class Config:
        from_attributes = True

    @classmethod
    def from_entity(cls, entity: MessageEntity) -> "MessageModel":
        """Create model from database entity."""
        return cls(
            id=entity.id,
            conversation_id=entity.conversation_id,
            sender=SenderRole(entity.sender),
            text=entity.text,
            created_at=_aware(entity.created_at),
        )


class ChatResult(BaseModel):
    """Outcome of handling one incoming user message."""

    reply: str = Field(description="Assistant reply (or fallback text)")
    session_id: str = Field(description="Conversation id to reuse as session token")
    was_truncated: bool = Field(default=False, description="Whether the input was cut")


class HistoryResult(BaseModel):
    """A conversation's full ordered transcript."""

    session_id: str = Field(description="Conversation id")
    messages: List[MessageModel] = Field(default_factory=list, description="Oldest first")
