"""
Base repository and query utilities.

This module provides the foundational repository pattern used across all
repository implementations in the centralized database layer. Built with
async SQLModel sessions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

# Generic type for SQLModel entities
EntityType = TypeVar("EntityType", bound=SQLModel)


class AsyncBaseRepository(Generic[EntityType]):
    """Base async repository with common CRUD operations using SQLModel."""

    def __init__(self, session: AsyncSession, model: Type[EntityType]) -> None:
        """Initialize repository with async database session and SQLModel entity class.

        Args:
            session: Async SQLModel Session for database operations
            model: SQLModel entity class for this repository
        """
        self.session = session
        self.model = model

    async def create(self, entity: EntityType) -> EntityType:
        """Persist a new entity and return it with generated fields populated."""
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def get_by_id(self, entity_id: str) -> Optional[EntityType]:
        """Get entity by its primary key, or None if not found."""
        return await self.session.get(self.model, entity_id)

    async def update(self, entity: EntityType) -> EntityType:
        """Flush changes made to ``entity`` and return the refreshed instance."""
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity: SQLModel) -> None:
        """Delete a loaded entity and commit."""
        await self.session.delete(entity)
        await self.session.commit()


class QueryBuilder:
    """Utility class for building SQLModel-based database queries."""

    @staticmethod
    def apply_filters(stmt, model: Type[SQLModel], filters: Dict[str, Any]):
        """Apply equality filters, skipping ``None`` values and unknown columns."""
        for key, value in filters.items():
            if value is not None and hasattr(model, key):
                stmt = stmt.where(getattr(model, key) == value)
        return stmt

    @staticmethod
    def apply_category(stmt, column, category: Optional[str]):
        """Filter on a category column; ``None`` and ``"all"`` mean no filter."""
        if category and category != "all":
            stmt = stmt.where(column == category)
        return stmt

    @staticmethod
    def apply_time_range(stmt, column, start: Optional[datetime], end: Optional[datetime]):
        """Restrict ``column`` to the inclusive ``[start, end]`` range."""
        if start is not None:
            stmt = stmt.where(column >= start)
        if end is not None:
            stmt = stmt.where(column <= end)
        return stmt

    @staticmethod
    def apply_pagination(stmt, limit: Optional[int], offset: Optional[int]):
        """Apply limit/offset to a select statement."""
        if offset is not None:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return stmt
