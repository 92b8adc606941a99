"""Chat service behaviour against in-memory doubles."""
from __future__ import annotations

import asyncio

import pytest

from api.features.chat.entities.message import SenderRole
from api.features.chat.exceptions import (
    ConversationNotFoundError,
    EmptyMessageError,
    InvalidMessageError,
    LLMRateLimitError,
    MissingSessionIdError,
)
from api.features.chat.service import FALLBACK_REPLY, ChatService
from conftest import FakeCompletion, InMemoryStore


def _service(completion=None, **kwargs):
    store = InMemoryStore()
    return ChatService(store, completion or FakeCompletion(), **kwargs), store


def test_valid_message_persists_user_and_ai_turns():
    service, store = _service()

    result = asyncio.run(service.handle_incoming_message("  Where is my order?  "))

    assert result.reply == "Happy to help!"
    assert result.was_truncated is False
    messages = store.messages[result.session_id]
    assert [m.sender for m in messages] == [SenderRole.USER, SenderRole.AI]
    assert messages[0].text == "Where is my order?"
    assert messages[1].text == "Happy to help!"


def test_history_given_to_completion_includes_new_message():
    completion = FakeCompletion()
    service, _ = _service(completion)

    asyncio.run(service.handle_incoming_message("Hi"))

    history, new_message = completion.calls[0]
    assert new_message == "Hi"
    assert [(m.sender, m.text) for m in history] == [(SenderRole.USER, "Hi")]


def test_long_message_is_truncated_to_limit():
    completion = FakeCompletion()
    service, store = _service(completion)

    result = asyncio.run(service.handle_incoming_message("x" * 2500))

    assert result.was_truncated is True
    user_msg = store.messages[result.session_id][0]
    assert len(user_msg.text) == 2000
    assert len(completion.calls[0][1]) == 2000


def test_message_at_limit_is_not_truncated():
    service, store = _service()

    result = asyncio.run(service.handle_incoming_message("y" * 2000))

    assert result.was_truncated is False
    assert len(store.messages[result.session_id][0].text) == 2000


@pytest.mark.parametrize("message", ["", "   ", "\n\t "])
def test_blank_message_is_rejected_without_persisting(message):
    service, store = _service()

    with pytest.raises(EmptyMessageError) as exc_info:
        asyncio.run(service.handle_incoming_message(message))

    assert exc_info.value.error_code == "EMPTY_MESSAGE"
    assert store.conversations == {}


@pytest.mark.parametrize("message", ["\ufeff", " \ufeff\n", "\ufeff \u3000"])
def test_byte_order_mark_counts_as_whitespace(message):
    service, store = _service()

    with pytest.raises(EmptyMessageError):
        asyncio.run(service.handle_incoming_message(message))

    assert store.conversations == {}


def test_byte_order_mark_is_trimmed_from_text():
    service, store = _service()

    result = asyncio.run(service.handle_incoming_message("\ufeffHello\ufeff "))

    assert store.messages[result.session_id][0].text == "Hello"


@pytest.mark.parametrize("message", [None, 42, ["hi"], {"text": "hi"}])
def test_non_string_message_is_rejected(message):
    service, store = _service()

    with pytest.raises(InvalidMessageError) as exc_info:
        asyncio.run(service.handle_incoming_message(message))

    assert exc_info.value.error_code == "INVALID_MESSAGE"
    assert store.conversations == {}


def test_existing_session_is_reused():
    service, store = _service()

    first = asyncio.run(service.handle_incoming_message("Hello"))
    second = asyncio.run(service.handle_incoming_message("Again", first.session_id))

    assert second.session_id == first.session_id
    assert len(store.conversations) == 1
    assert len(store.messages[first.session_id]) == 4


def test_unknown_session_starts_new_conversation():
    service, store = _service()

    result = asyncio.run(service.handle_incoming_message("Hello", "not-a-real-session"))

    assert result.session_id != "not-a-real-session"
    assert list(store.conversations) == [result.session_id]


def test_completion_error_message_becomes_reply():
    completion = FakeCompletion(error=LLMRateLimitError())
    service, store = _service(completion)

    result = asyncio.run(service.handle_incoming_message("Hello"))

    assert result.reply == LLMRateLimitError.default_message
    ai_msg = store.messages[result.session_id][-1]
    assert ai_msg.sender == SenderRole.AI
    assert ai_msg.text == result.reply


def test_completion_error_without_message_uses_fallback():
    completion = FakeCompletion(error=RuntimeError())
    service, store = _service(completion)

    result = asyncio.run(service.handle_incoming_message("Hello"))

    assert result.reply == FALLBACK_REPLY
    assert store.messages[result.session_id][-1].text == FALLBACK_REPLY


def test_fetch_history_requires_session_id():
    service, _ = _service()

    for session_id in (None, "", "  "):
        with pytest.raises(MissingSessionIdError):
            asyncio.run(service.fetch_history(session_id))


def test_fetch_history_unknown_session():
    service, _ = _service()

    with pytest.raises(ConversationNotFoundError) as exc_info:
        asyncio.run(service.fetch_history("0b6f3c55-1b51-4a8e-9a43-4f5d3f0f7e11"))

    assert exc_info.value.error_code == "CONVERSATION_NOT_FOUND"
    assert exc_info.value.status_code == 404


def test_fetch_history_returns_ordered_messages():
    service, _ = _service()

    async def scenario():
        first = await service.handle_incoming_message("one")
        await service.handle_incoming_message("two", first.session_id)
        return await service.fetch_history(first.session_id)

    history = asyncio.run(scenario())

    assert [m.text for m in history.messages] == ["one", "Happy to help!", "two", "Happy to help!"]
    stamps = [m.created_at for m in history.messages]
    assert stamps == sorted(stamps)
    assert len(set(stamps)) == len(stamps)


def test_serialized_sessions_see_each_others_turns():
    completion = FakeCompletion()
    service, store = _service(completion, serialize_sessions=True)

    async def scenario():
        first = await service.handle_incoming_message("start")
        completion.calls.clear()
        await asyncio.gather(
            service.handle_incoming_message("a", first.session_id),
            service.handle_incoming_message("b", first.session_id),
        )
        return first.session_id

    session_id = asyncio.run(scenario())

    first_call, second_call = completion.calls
    assert len(first_call[0]) == 3
    assert len(second_call[0]) == 5
    assert len(store.messages[session_id]) == 6
