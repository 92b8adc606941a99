"""Infrastructure resources: database engine and completion client.

This module is part of the infra layer and must not import from application features.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from openai import AsyncOpenAI
from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

logger = structlog.get_logger("support.infra")


class DatabaseResource:
    """Database resource for dependency injection."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.engine = None
        self.session_factory = None

    async def init(self):
        """Initialize database connection."""
        options = {"echo": False, "pool_pre_ping": True}
        if not self.database_url.startswith("sqlite"):
            options["pool_recycle"] = 3600
        self.engine = create_async_engine(self.database_url, **options)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        return self

    def get_session(self) -> AsyncSession:
        """Get database session (synchronous accessor)."""
        if self.session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.session_factory()

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession]:
        """Yield a session that is rolled back on error and always closed."""
        session = self.get_session()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_schema(self, metadata: MetaData) -> None:
        """Create all tables known to ``metadata`` (local runs and tests)."""
        if self.engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def shutdown(self):
        """Shutdown database connection."""
        if self.engine:
            await self.engine.dispose()


def build_completion_client(api_key: str, base_url: str) -> Optional[AsyncOpenAI]:
    """Build the OpenAI-compatible client, or ``None`` when no key is configured."""
    if not api_key:
        logger.warning("completion_client_disabled", reason="GROQ_API_KEY not set")
        return None
    return AsyncOpenAI(api_key=api_key, base_url=base_url)
