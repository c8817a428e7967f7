from typing import Protocol, Type

from domain.ports.repository import Repository, T


class UnitOfWork(Protocol):
    """
    Unit of Work Interface.
    Groups several statements into one transaction: commit on success,
    rollback on any exception.
    """

    async def __aenter__(self) -> "UnitOfWork": ...

    async def __aexit__(self, exc_type, exc_value, traceback) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    def repository(self, model_cls: Type[T]) -> Repository[T]: ...
