"""Chat service: the request lifecycle behind the chat endpoints."""
import asyncio
import logging
import re
import weakref
from typing import Any, Optional

from api.features.chat.completion import CompletionService
from api.features.chat.entities.message import SenderRole
from api.features.chat.exceptions import (
    ConversationNotFoundError,
    EmptyMessageError,
    InvalidMessageError,
    MissingSessionIdError,
)
from api.features.chat.models import ChatResult, HistoryResult
from api.features.chat.store import ConversationStore
from api.shared.utils import normalize_uuid

logger = logging.getLogger("support.chat.service")

# Leading and trailing whitespace, including the byte order mark
_EDGE_WHITESPACE = re.compile(r"\A[\s\ufeff]+|[\s\ufeff]+\Z")

FALLBACK_REPLY = (
    "I'm sorry, I'm having trouble responding right now. Please try again in a moment."
)


class ChatService:
    """Validates input, persists both sides of a turn and asks the model for a reply.

    Completion failures never fail the request: the error's user-facing text
    is stored and returned as the assistant's reply.
    """

    def __init__(
        self,
        store: ConversationStore,
        completion: CompletionService,
        *,
        max_message_length: int = 2000,
        serialize_sessions: bool = False,
    ):
        self.store = store
        self.completion = completion
        self.max_message_length = max_message_length
        self.serialize_sessions = serialize_sessions
        self._session_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def prepare_message(self, message: Any) -> tuple[str, bool]:
        """Trim and bound the message; returns ``(text, was_truncated)``."""
        if not isinstance(message, str):
            raise InvalidMessageError()

        trimmed = _EDGE_WHITESPACE.sub("", message)
        if not trimmed:
            raise EmptyMessageError()

        if len(trimmed) > self.max_message_length:
            logger.warning(
                "Message truncated from %d to %d characters",
                len(trimmed),
                self.max_message_length,
            )
            return trimmed[: self.max_message_length], True
        return trimmed, False

    async def handle_incoming_message(
        self, message: Any, session_id: Optional[str] = None
    ) -> ChatResult:
        final_message, was_truncated = self.prepare_message(message)

        if self.serialize_sessions and session_id:
            async with self._lock_for(normalize_uuid(session_id) or session_id):
                return await self._exchange(final_message, session_id, was_truncated)
        return await self._exchange(final_message, session_id, was_truncated)

    async def fetch_history(self, session_id: Optional[str]) -> HistoryResult:
        if not session_id or not session_id.strip():
            raise MissingSessionIdError()

        conversation = await self.store.get_conversation(session_id)
        if conversation is None:
            raise ConversationNotFoundError(session_id)

        messages = await self.store.get_messages(conversation.id)
        return HistoryResult(session_id=conversation.id, messages=messages)

    async def _exchange(
        self, final_message: str, session_id: Optional[str], was_truncated: bool
    ) -> ChatResult:
        conversation = await self.store.get_or_create_conversation(session_id)
        await self.store.add_message(conversation.id, SenderRole.USER, final_message)

        history = await self.store.get_messages(conversation.id)

        try:
            reply = await self.completion.generate_reply(history, final_message)
        except Exception as e:
            logger.error("Completion failed for conversation %s: %r", conversation.id, e)
            reply = str(e).strip() or FALLBACK_REPLY

        await self.store.add_message(conversation.id, SenderRole.AI, reply)

        return ChatResult(
            reply=reply, session_id=conversation.id, was_truncated=was_truncated
        )

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._session_locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._session_locks[session_id] = lock
        return lock
