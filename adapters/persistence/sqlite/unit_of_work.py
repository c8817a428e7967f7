from typing import Type

from sqlalchemy.ext.asyncio import AsyncSession

from adapters.persistence.sqlite.base_repository import SqlAlchemyRepository
from domain.ports.repository import T
from domain.ports.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """Transaction scope over a request's session; the session owner closes it."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        if exc_type:
            await self.rollback()
        else:
            await self.commit()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()

    def repository(self, model_cls: Type[T]) -> SqlAlchemyRepository[T]:
        return SqlAlchemyRepository(self.session, model_cls)
