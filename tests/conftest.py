"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional
from uuid import uuid4

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

# Ensure the project root is on the import path (for local runs without installing)
ROOT_PATH = Path(__file__).resolve().parent.parent
if str(ROOT_PATH) not in sys.path:
    sys.path.insert(0, str(ROOT_PATH))

from api.features.chat.entities.message import SenderRole  # noqa: E402
from api.features.chat.models import ConversationModel, MessageModel  # noqa: E402
from api.main import create_fastapi_app  # noqa: E402
from core.settings import (  # noqa: E402
    AppSettings,
    ChatSettings,
    LLMSettings,
    PgDbSettings,
    Settings,
)
from di.container import ApplicationContainer  # noqa: E402


class FakeCompletion:
    """Completion double that records every call."""

    def __init__(self, reply: str = "Happy to help!", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[tuple] = []

    async def generate_reply(self, history, new_message: str) -> str:
        self.calls.append((list(history), new_message))
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.reply


class InMemoryStore:
    """Store double with the same async surface as ``ConversationStore``."""

    def __init__(self):
        self.conversations: Dict[str, ConversationModel] = {}
        self.messages: Dict[str, List[MessageModel]] = {}
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _now(self) -> datetime:
        self._clock += timedelta(milliseconds=1)
        return self._clock

    async def create_conversation(self) -> ConversationModel:
        now = self._now()
        conv = ConversationModel(id=str(uuid4()), created_at=now, updated_at=now)
        self.conversations[conv.id] = conv
        self.messages[conv.id] = []
        return conv

    async def get_conversation(self, conversation_id: str) -> Optional[ConversationModel]:
        await asyncio.sleep(0)
        return self.conversations.get(conversation_id)

    async def touch_conversation(self, conversation_id: str) -> None:
        conv = self.conversations.get(conversation_id)
        if conv:
            self.conversations[conversation_id] = conv.model_copy(
                update={"updated_at": self._now()}
            )

    async def add_message(self, conversation_id: str, sender: SenderRole, text: str) -> MessageModel:
        await asyncio.sleep(0)
        msg = MessageModel(
            id=str(uuid4()),
            conversation_id=conversation_id,
            sender=SenderRole(sender),
            text=text,
            created_at=self._now(),
        )
        self.messages.setdefault(conversation_id, []).append(msg)
        await self.touch_conversation(conversation_id)
        return msg

    async def get_messages(self, conversation_id: str) -> List[MessageModel]:
        await asyncio.sleep(0)
        return list(self.messages.get(conversation_id, []))

    async def get_or_create_conversation(self, session_id: Optional[str] = None) -> ConversationModel:
        if session_id:
            existing = await self.get_conversation(session_id)
            if existing:
                return existing
        return await self.create_conversation()


def make_settings(tmp_path: Path, **app_overrides) -> Settings:
    return Settings(
        APP=AppSettings(LOG_LEVEL="WARNING", **app_overrides),
        DATABASE=PgDbSettings(
            DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}",
            AUTO_CREATE_SCHEMA=True,
        ),
        LLM=LLMSettings(GROQ_API_KEY=""),
        CHAT=ChatSettings(),
    )


def make_container(settings: Settings) -> ApplicationContainer:
    container = ApplicationContainer()
    container.infrastructure.settings.override(providers.Object(settings))
    return container


@pytest.fixture(scope="function")
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture(scope="function")
def fake_completion() -> FakeCompletion:
    return FakeCompletion()


@pytest.fixture(scope="function")
def container(settings: Settings, fake_completion: FakeCompletion) -> ApplicationContainer:
    container = make_container(settings)
    container.services.completion_service.override(providers.Object(fake_completion))
    return container


@pytest.fixture(scope="function")
def client(container: ApplicationContainer):
    app = create_fastapi_app(container)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
