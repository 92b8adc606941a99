"""DTOs for the Chat feature."""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field

from api.features.chat.entities.message import SenderRole
from api.shared.dtos import BaseDTO


class SendMessageRequest(BaseDTO):
    """Incoming chat message; ``message`` is validated by the service."""

    message: Any = Field(default=None, description="User message text")
    session_id: Optional[str] = Field(
        default=None, alias="sessionId", description="Existing session to continue"
    )


class SendMessageResponse(BaseDTO):
    """Assistant reply for one message."""

    reply: str = Field(description="Assistant reply")
    session_id: str = Field(alias="sessionId", description="Session token for follow-ups")
    was_truncated: Optional[bool] = Field(
        default=None, alias="wasTruncated", description="Present only when the input was cut"
    )


class MessageDTO(BaseDTO):
    """Conversation message DTO."""

    id: str = Field(description="Message identifier")
    conversation_id: str = Field(description="Owning conversation identifier")
    sender: SenderRole = Field(description="Message author: user or ai")
    text: str = Field(description="Message text")
    created_at: datetime = Field(description="Creation timestamp")


class HistoryResponse(BaseDTO):
    """Full transcript of a session."""

    session_id: str = Field(alias="sessionId", description="Session identifier")
    messages: List[MessageDTO] = Field(description="Messages in chronological order")
