from typing import Any, Dict, List, Optional, Type

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.ports.repository import Repository, T


class SqlAlchemyRepository(Repository[T]):
    def __init__(self, session: AsyncSession, model_cls: Type[T]):
        self.session = session
        self.model_cls = model_cls

    def _filtered(self, stmt, filters: Dict[str, Any]):
        for column, value in filters.items():
            if value is None:
                continue
            attr = getattr(self.model_cls, column)
            if isinstance(value, (list, tuple, set)):
                stmt = stmt.where(attr.in_(list(value)))
            else:
                stmt = stmt.where(attr == value)
        return stmt

    async def get(self, id: Any) -> Optional[T]:
        return await self.session.get(self.model_cls, id)

    async def get_one(self, id: Any) -> T:
        stmt = select(self.model_cls).where(self.model_cls.id == id)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def add(self, entity: T) -> T:
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def update(self, id: Any, changes: Dict[str, Any]) -> T:
        entity = await self.get_one(id)
        for key, value in changes.items():
            if hasattr(self.model_cls, key):
                setattr(entity, key, value)
        await self.session.flush()
        return entity

    async def delete(self, id: Any) -> bool:
        obj = await self.get(id)
        if obj:
            await self.session.delete(obj)
            await self.session.flush()
            return True
        return False

    async def list(self, limit: int = 100, offset: int = 0, order_by: Any = None, **filters: Any) -> List[T]:
        stmt = self._filtered(select(self.model_cls), filters)
        if order_by is not None:
            stmt = stmt.order_by(*order_by) if isinstance(order_by, (list, tuple)) else stmt.order_by(order_by)
        stmt = stmt.limit(limit).offset(offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, **filters: Any) -> int:
        stmt = self._filtered(select(func.count()).select_from(self.model_cls), filters)
        result = await self.session.execute(stmt)
        return result.scalar_one()
