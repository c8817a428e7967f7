from typing import Any, Dict, List, Optional, Protocol, TypeVar

T = TypeVar("T")


class Repository(Protocol[T]):
    """
    Generic Repository Interface.
    Decouples services from ORM/SQL usage for single-table CRUD.
    """

    async def get(self, id: Any) -> Optional[T]:
        """Fetch entity by ID, None when absent."""
        ...

    async def get_one(self, id: Any) -> T:
        """Fetch entity by ID; a missing row raises the driver's no-rows error."""
        ...

    async def add(self, entity: T) -> T:
        """Insert and flush so generated columns are populated."""
        ...

    async def update(self, id: Any, changes: Dict[str, Any]) -> T:
        """Apply column changes to an existing row."""
        ...

    async def delete(self, id: Any) -> bool:
        """Delete entity by ID."""
        ...

    async def list(self, limit: int = 100, offset: int = 0, order_by: Any = None, **filters: Any) -> List[T]:
        """List entities matching equality filters."""
        ...

    async def count(self, **filters: Any) -> int:
        ...
