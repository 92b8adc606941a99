"""Conversation store: persistence of conversations and their messages.

Every operation runs in its own session and commits before returning, so a
request never holds a transaction open across the completion call.
"""
from __future__ import annotations

from typing import List, Optional
from uuid import uuid4

import structlog
from sqlalchemy.exc import SQLAlchemyError

from api.features.chat.entities.conversation import Conversation
from api.features.chat.entities.message import Message, SenderRole
from api.features.chat.models import ConversationModel, MessageModel
from api.features.chat.repositories.chat_repository import (
    ConversationRepository,
    MessageRepository,
)
from api.shared.entities.base import utcnow
from api.shared.exceptions import StorageError
from api.shared.utils import normalize_uuid
from infra.resources import DatabaseResource

logger = structlog.get_logger("support.chat.store")

_DB_ERRORS = (SQLAlchemyError, OSError)


class ConversationStore:
    """Create/read conversations, append/list messages."""

    def __init__(self, database: DatabaseResource):
        self.database = database

    async def create_conversation(self) -> ConversationModel:
        now = utcnow()
        try:
            async with self.database.session_scope() as session:
                entity = await ConversationRepository(session).create(
                    Conversation(id=str(uuid4()), created_at=now, updated_at=now)
                )
                await session.commit()
        except _DB_ERRORS as e:
            logger.error("conversation_create_failed", error=str(e))
            raise StorageError("Failed to create conversation", {"cause": str(e)}) from e

        logger.info("conversation_created", conversation_id=entity.id)
        return ConversationModel.from_entity(entity)

    async def get_conversation(self, conversation_id: str) -> Optional[ConversationModel]:
        """Return the conversation, or ``None`` when it does not exist."""
        conversation_id = normalize_uuid(conversation_id)
        if conversation_id is None:
            return None
        try:
            async with self.database.session_scope() as session:
                entity = await ConversationRepository(session).get_by_id(conversation_id)
        except _DB_ERRORS as e:
            logger.error(
                "conversation_fetch_failed", conversation_id=conversation_id, error=str(e)
            )
            raise StorageError("Failed to fetch conversation", {"cause": str(e)}) from e
        return ConversationModel.from_entity(entity) if entity else None

    async def touch_conversation(self, conversation_id: str) -> None:
        """Best-effort bump of ``updated_at``; failures are logged only."""
        try:
            async with self.database.session_scope() as session:
                await ConversationRepository(session).touch(conversation_id, utcnow())
                await session.commit()
        except _DB_ERRORS as e:
            logger.warning(
                "conversation_touch_failed", conversation_id=conversation_id, error=str(e)
            )

    async def add_message(
        self, conversation_id: str, sender: SenderRole, text: str
    ) -> MessageModel:
        sender = SenderRole(sender)
        try:
            async with self.database.session_scope() as session:
                entity = await MessageRepository(session).create(
                    Message(
                        id=str(uuid4()),
                        conversation_id=conversation_id,
                        sender=sender.value,
                        text=text,
                        created_at=utcnow(),
                    )
                )
                await session.commit()
        except _DB_ERRORS as e:
            logger.error(
                "message_insert_failed",
                conversation_id=conversation_id,
                sender=sender.value,
                error=str(e),
            )
            raise StorageError("Failed to save message", {"cause": str(e)}) from e

        # Not rolled back if this fails
        await self.touch_conversation(conversation_id)
        return MessageModel.from_entity(entity)

    async def get_messages(self, conversation_id: str) -> List[MessageModel]:
        """Messages of a conversation, oldest first; empty for unknown ids."""
        conversation_id = normalize_uuid(conversation_id)
        if conversation_id is None:
            return []
        try:
            async with self.database.session_scope() as session:
                entities = await MessageRepository(session).list_for_conversation(
                    conversation_id
                )
        except _DB_ERRORS as e:
            logger.error(
                "message_fetch_failed", conversation_id=conversation_id, error=str(e)
            )
            raise StorageError("Failed to fetch messages", {"cause": str(e)}) from e
        return [MessageModel.from_entity(entity) for entity in entities]

    async def get_or_create_conversation(
        self, session_id: Optional[str] = None
    ) -> ConversationModel:
        """Resolve the conversation a request belongs to."""
        if session_id:
            existing = await self.get_conversation(session_id)
            if existing:
                return existing
        return await self.create_conversation()
