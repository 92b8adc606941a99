"""Conversation and message repositories using base repository pattern."""
from datetime import datetime
from typing import List

from api.features.chat.entities.conversation import Conversation
from api.features.chat.entities.message import Message
from api.shared.base import BaseRepository


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for conversation entities."""

    model = Conversation

    async def touch(self, conversation_id: str, at: datetime) -> bool:
        """Bump ``updated_at`` for recency tracking."""
        return await self.update_by_id(conversation_id, updated_at=at)


class MessageRepository(BaseRepository[Message]):
    """Repository for message entities."""

    model = Message

    async def list_for_conversation(self, conversation_id: str) -> List[Message]:
        """All messages of a conversation in chronological order."""
        return await self.get_by_field(
            "conversation_id", conversation_id, order_by="created_at"
        )
