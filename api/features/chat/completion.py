"""Completion service: turns a conversation into the assistant's next reply."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import openai
import structlog
from openai import AsyncOpenAI

from api.features.chat.entities.message import SenderRole
from api.features.chat.exceptions import (
    LLMAuthError,
    LLMEmptyResponseError,
    LLMError,
    LLMGenericError,
    LLMRateLimitError,
    LLMUnavailableError,
)
from api.features.chat.models import MessageModel
from api.features.chat.prompts import SYSTEM_PROMPT

logger = structlog.get_logger("support.chat.completion")

_ROLE_MAP = {
    SenderRole.USER: "user",
    SenderRole.AI: "assistant",
}


def classify_provider_error(error: Exception) -> LLMError:
    """Map a provider exception onto the user-presentable LLM error taxonomy."""
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return LLMAuthError()
    if isinstance(error, openai.RateLimitError):
        return LLMRateLimitError()

    status = getattr(error, "status_code", None)
    if status in (401, 403):
        return LLMAuthError()
    if status == 429:
        return LLMRateLimitError()
    return LLMGenericError()


class CompletionService:
    """Generates replies through an OpenAI-compatible chat completion API."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        *,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 500,
        history_window: int = 10,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.history_window = history_window
        self.system_prompt = system_prompt

    def build_messages(
        self, history: Sequence[MessageModel], new_message: str
    ) -> List[Dict[str, str]]:
        """System prompt, the trailing history window, then the new user turn."""
        window = list(history)[-self.history_window:] if self.history_window > 0 else []
        messages = [{"role": "system", "content": self.system_prompt}]
        messages.extend(
            {"role": _ROLE_MAP[SenderRole(m.sender)], "content": m.text} for m in window
        )
        messages.append({"role": "user", "content": new_message})
        return messages

    async def generate_reply(
        self, history: Sequence[MessageModel], new_message: str
    ) -> str:
        if self.client is None:
            raise LLMUnavailableError()

        messages = self.build_messages(history, new_message)
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.error(
                "completion_failed",
                model=self.model,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise classify_provider_error(e) from e

        reply = _first_choice_text(completion)
        if not reply or not reply.strip():
            logger.error("completion_empty", model=self.model)
            raise LLMEmptyResponseError()

        usage = getattr(completion, "usage", None)
        logger.info(
            "completion_generated",
            model=self.model,
            turns=len(messages),
            total_tokens=getattr(usage, "total_tokens", None),
        )
        return reply.strip()


def _first_choice_text(completion: Any) -> Optional[str]:
    choices = getattr(completion, "choices", None) or []
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    return getattr(message, "content", None)
