"""Exceptions for the Chat feature.

Completion errors carry a message that is safe to show to the end user; the
chat service turns them into the assistant's reply instead of an HTTP error.
"""
from typing import Any, Dict, Optional

from api.shared.exceptions import NotFoundError, SupportChatException, ValidationError


class InvalidMessageError(ValidationError):
    """Raised when the message is missing or not a string."""

    def __init__(self):
        super().__init__("Message is required and must be a string", "INVALID_MESSAGE")


class EmptyMessageError(ValidationError):
    """Raised when the message is blank after trimming."""

    def __init__(self):
        super().__init__("Message cannot be empty", "EMPTY_MESSAGE")


class MissingSessionIdError(ValidationError):
    """Raised when history is requested without a session id."""

    def __init__(self):
        super().__init__("Session ID is required", "MISSING_SESSION_ID")


class ConversationNotFoundError(NotFoundError):
    """Raised when a session id does not resolve to a conversation."""

    def __init__(self, session_id: str):
        super().__init__(
            "Conversation not found", "CONVERSATION_NOT_FOUND", {"session_id": session_id}
        )


class LLMError(SupportChatException):
    """Base exception for completion failures."""

    default_message = "I'm sorry, something went wrong. Please try again."
    code = "LLM_ERROR"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.default_message, self.code, details, status_code=503)


class LLMUnavailableError(LLMError):
    """Raised when no provider credential is configured."""

    default_message = "The assistant is not configured right now. Please try again later."
    code = "LLM_UNAVAILABLE"


class LLMAuthError(LLMError):
    """Raised when the provider rejects the credential."""

    default_message = "There's a configuration issue on our end. Please contact support."
    code = "LLM_AUTH_ERROR"


class LLMRateLimitError(LLMError):
    """Raised when the provider throttles the request."""

    default_message = (
        "I'm experiencing high demand right now. Please wait a moment and try again."
    )
    code = "LLM_RATE_LIMIT"


class LLMEmptyResponseError(LLMError):
    """Raised when the provider returns no text."""

    code = "LLM_EMPTY_RESPONSE"


class LLMGenericError(LLMError):
    """Raised for any other provider failure."""

    code = "LLM_GENERIC_ERROR"
