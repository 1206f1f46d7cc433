from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.inspection import inspect as sa_inspect
from sqlalchemy.orm import InstrumentedAttribute

T = TypeVar("T")  # SQLAlchemy model class (Declarative)


class BaseRepository(Generic[T]):
    """
    Shared repository for SQLAlchemy 2.x async sessions (model instances only).
    - Filters are plain equality conditions passed as keyword arguments.
    - Writes only flush; commit/rollback is up to the calling service.
    """

    model: type[T]

    def __init__(self, model: type[T] | None = None) -> None:
        if model is not None:
            self.model = model

    # ------------------------ Read ------------------------

    async def get(self, session: AsyncSession, pk: Any) -> T | None:
        """Fetch one row by primary key"""
        return await session.get(self.model, pk)

    async def first(self, session: AsyncSession, **filters: Any) -> T | None:
        """First row matching the filters, or None"""
        stmt = select(self.model).filter_by(**filters).limit(1)
        res = await session.execute(stmt)
        return res.scalars().first()

    async def exists(self, session: AsyncSession, **filters: Any) -> bool:
        """Existence check"""
        return await self.count(session, **filters) > 0

    async def count(self, session: AsyncSession, **filters: Any) -> int:
        stmt = select(func.count()).select_from(self.model)
        if filters:
            stmt = stmt.filter_by(**filters)
        res = await session.execute(stmt)
        return int(res.scalar_one())

    async def list(
        self,
        session: AsyncSession,
        *,
        where: dict[str, Any] | None = None,
        order_by: Sequence[InstrumentedAttribute] | None = None,
    ) -> list[T]:
        stmt = select(self.model)
        if where:
            stmt = stmt.filter_by(**where)
        if order_by:
            stmt = stmt.order_by(*order_by)
        res = await session.execute(stmt)
        return list(res.scalars().all())

    # ------------------------ Write ------------------------

    async def create(self, session: AsyncSession, obj: T) -> T:
        """
        Insert a new instance.
        - only transient (never persisted) instances are accepted
        """
        state = sa_inspect(obj)
        if not state.transient:
            raise ValueError("create(): expected a transient (new) SQLAlchemy model instance")
        session.add(obj)
        await session.flush()
        return obj

    async def remove(self, session: AsyncSession, obj: T) -> None:
        """Delete a loaded instance"""
        await session.delete(obj)
        await session.flush()

    async def delete_where(self, session: AsyncSession, **filters: Any) -> int:
        """Bulk delete by equality filters, returns the affected row count"""
        if not filters:
            raise ValueError("delete_where(): refusing to delete without filters")
        stmt = sa_delete(self.model).filter_by(**filters)
        res = await session.execute(stmt)
        return res.rowcount or 0
