"""Base classes and common patterns for the application repository layer."""
from abc import ABC
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from api.shared.entities.base import BaseEntity

T = TypeVar("T", bound=BaseEntity)


class BaseRepository(ABC, Generic[T]):
    """Base repository with the CRUD operations shared by all entities."""

    model: Type[T]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entity: T) -> T:
        """Create new entity."""
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def get_by_id(self, entity_id: str) -> Optional[T]:
        """Get entity by ID."""
        stmt = select(self.model).where(self.model.id == entity_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_field(
        self,
        field_name: str,
        value: Any,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
    ) -> List[T]:
        """Get entities by field value, optionally ordered (``-field`` for descending)."""
        field = getattr(self.model, field_name)
        stmt = select(self.model).where(field == value)

        if order_by:
            descending = order_by.startswith("-")
            column = getattr(self.model, order_by.lstrip("-"))
            stmt = stmt.order_by(column.desc() if descending else column.asc())

        if limit:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_by_id(self, entity_id: str, **kwargs: Any) -> bool:
        """Update entity columns by ID; returns whether a row matched."""
        stmt = (
            update(self.model)
            .where(self.model.id == entity_id)
            .values(**kwargs)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0
