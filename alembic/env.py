"""Alembic environment: runs migrations against ``DATABASE.DATABASE_URL``."""
import asyncio

from alembic import context
from sqlalchemy.ext.asyncio import create_async_engine

from api.shared.entities.registry import BaseEntity
from core.settings import get_settings

config = context.config
target_metadata = BaseEntity.metadata
database_url = get_settings().DATABASE.DATABASE_URL


def run_migrations_offline() -> None:
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(database_url)
    async with engine.connect() as connection:
        await connection.run_sync(_run_sync_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
