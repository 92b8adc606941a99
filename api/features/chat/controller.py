"""Controller for the Chat feature."""
import logging
from typing import Optional

from api.features.chat.dtos import (
    HistoryResponse,
    MessageDTO,
    SendMessageRequest,
    SendMessageResponse,
)
from api.features.chat.service import ChatService

logger = logging.getLogger("support.chat")


class ChatController:
    """Controller translating between chat DTOs and the chat service."""

    def __init__(self, chat_service: ChatService):
        self.chat_service = chat_service

    async def send_message(self, request: SendMessageRequest) -> SendMessageResponse:
        result = await self.chat_service.handle_incoming_message(
            request.message, request.session_id
        )
        logger.info(f"Reply sent for session {result.session_id}")
        return SendMessageResponse(
            reply=result.reply,
            session_id=result.session_id,
            was_truncated=True if result.was_truncated else None,
        )

    async def get_history(self, session_id: Optional[str]) -> HistoryResponse:
        result = await self.chat_service.fetch_history(session_id)
        return HistoryResponse(
            session_id=result.session_id,
            messages=[
                MessageDTO.model_validate(m, from_attributes=True) for m in result.messages
            ],
        )
