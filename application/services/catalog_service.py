import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from adapters.persistence.sqlite.base_repository import SqlAlchemyRepository
from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError
from app.models.catalog import Arc, Book, Issue, Saga, Volume
from app.models.reader import Review
from application.services.review_service import review_dict
from domain.rules.catalog_rules import CatalogRules

logger = logging.getLogger(__name__)

CHILD_ATTRS = {Book: "volumes", Volume: "sagas", Saga: "arcs", Arc: "issues"}


def _summary(node) -> Dict[str, Any]:
    return {"id": node.id, "title": node.title, "status": node.status}


def tree_dict(node, full: bool = True) -> Dict[str, Any]:
    """Node plus its loaded descendants; ``full=False`` keeps only id/title/status below the top."""
    data = node.to_dict()
    attr = CHILD_ATTRS.get(type(node))
    if attr:
        data[attr] = [_subtree(child, full) for child in getattr(node, attr)]
    return data


def _subtree(node, full: bool) -> Dict[str, Any]:
    data = node.to_dict() if full else _summary(node)
    attr = CHILD_ATTRS.get(type(node))
    if attr:
        data[attr] = [_subtree(child, full) for child in getattr(node, attr)]
    return data


def _book_tree_options():
    return selectinload(Book.volumes).selectinload(Volume.sagas).selectinload(Saga.arcs).selectinload(Arc.issues)


class BookService:
    async def list_books(self, session: AsyncSession, title_filter: Optional[str] = None) -> List[Dict]:
        stmt = select(Book).options(_book_tree_options()).order_by(Book.id)
        if title_filter:
            stmt = stmt.where(Book.title.ilike(f"%{title_filter}%"))
        result = await session.execute(stmt)
        return [tree_dict(book, full=False) for book in result.scalars().all()]

    async def list_admin(self, session: AsyncSession) -> List[Dict]:
        stmt = select(Book).options(_book_tree_options()).order_by(Book.created_at.desc(), Book.id.desc())
        result = await session.execute(stmt)
        return [tree_dict(book, full=False) for book in result.scalars().all()]

    async def get_book(self, session: AsyncSession, book_id: int) -> Dict:
        """Full hierarchy plus reviews; a missing book raises NoResultFound."""
        stmt = select(Book).where(Book.id == book_id).options(_book_tree_options())
        book = (await session.execute(stmt)).scalar_one()

        reviews_stmt = (
            select(Review)
            .where(Review.item_type == "book", Review.item_id == book_id)
            .options(selectinload(Review.user))
            .order_by(Review.created_at.desc())
        )
        reviews = (await session.execute(reviews_stmt)).scalars().all()

        data = tree_dict(book, full=True)
        data["reviews"] = [review_dict(review) for review in reviews]
        return data

    async def create_book(self, session: AsyncSession, data: Dict[str, Any]) -> Dict:
        data = {k: v for k, v in data.items() if v is not None}
        data.setdefault("author", settings.DEFAULT_BOOK_AUTHOR)
        book = await SqlAlchemyRepository(session, Book).add(Book(**data))
        await session.commit()
        logger.info(f"Created book {book.id}")
        return book.to_dict()

    async def update_book(self, session: AsyncSession, book_id: int, payload: Dict[str, Any]) -> Dict:
        book = await SqlAlchemyRepository(session, Book).update(book_id, CatalogRules.prepare_update(payload))
        await session.commit()
        return book.to_dict()

    async def delete_book(self, session: AsyncSession, book_id: int) -> Dict:
        repo = SqlAlchemyRepository(session, Book)
        await repo.get_one(book_id)
        # Volumes and everything below go with it through ON DELETE CASCADE.
        await repo.delete(book_id)
        await session.commit()
        logger.info(f"Deleted book {book_id}")
        return {"message": "Book deleted successfully"}


@dataclass(frozen=True)
class CatalogLevel:
    model: Type
    label: str
    parent_model: Type
    parent_field: str
    parent_label: str
    parent_attr: str
    children_attr: Optional[str] = None


VOLUMES = CatalogLevel(Volume, "Volume", Book, "book_id", "Book", "book", "sagas")
SAGAS = CatalogLevel(Saga, "Saga", Volume, "volume_id", "Volume", "volume", "arcs")
ARCS = CatalogLevel(Arc, "Arc", Saga, "saga_id", "Saga", "saga", "issues")
ISSUES = CatalogLevel(Issue, "Issue", Arc, "arc_id", "Arc", "arc")


class CatalogLevelService:
    """Admin CRUD for one level below Book; every level shares the same parent and ordering rules."""

    def __init__(self, level: CatalogLevel):
        self.level = level

    @property
    def not_found(self) -> str:
        return f"{self.level.label} not found"

    def _options(self):
        options = [selectinload(getattr(self.level.model, self.level.parent_attr))]
        if self.level.children_attr:
            options.append(selectinload(getattr(self.level.model, self.level.children_attr)))
        return options

    def _to_dict(self, node) -> Dict[str, Any]:
        data = node.to_dict()
        parent = getattr(node, self.level.parent_attr)
        data[self.level.parent_attr] = {"id": parent.id, "title": parent.title} if parent else None
        if self.level.children_attr:
            data[self.level.children_attr] = [_summary(child) for child in getattr(node, self.level.children_attr)]
        return data

    async def _load(self, session: AsyncSession, node_id: int):
        model = self.level.model
        stmt = select(model).where(model.id == node_id).options(*self._options())
        return (await session.execute(stmt)).scalar_one()

    async def _ensure_parent(self, session: AsyncSession, parent_id: int) -> None:
        if await session.get(self.level.parent_model, parent_id) is None:
            raise NotFoundError(f"{self.level.parent_label} not found")

    async def _ensure_free_order_index(
        self, session: AsyncSession, parent_id: int, order_index: int, exclude_id: Optional[int] = None
    ) -> None:
        model = self.level.model
        stmt = select(model.id).where(
            getattr(model, self.level.parent_field) == parent_id,
            model.order_index == order_index,
        )
        if exclude_id is not None:
            stmt = stmt.where(model.id != exclude_id)
        if (await session.execute(stmt)).first() is not None:
            raise ConflictError(f"Order index already exists for this {self.level.parent_label.lower()}")

    async def list_all(self, session: AsyncSession) -> List[Dict]:
        model = self.level.model
        stmt = select(model).options(*self._options()).order_by(model.created_at.desc(), model.id.desc())
        result = await session.execute(stmt)
        return [self._to_dict(node) for node in result.scalars().all()]

    async def get(self, session: AsyncSession, node_id: int) -> Dict:
        return self._to_dict(await self._load(session, node_id))

    async def create(self, session: AsyncSession, data: Dict[str, Any]) -> Dict:
        parent_id = data[self.level.parent_field]
        await self._ensure_parent(session, parent_id)
        await self._ensure_free_order_index(session, parent_id, data["order_index"])

        node = self.level.model(**{k: v for k, v in data.items() if v is not None})
        await SqlAlchemyRepository(session, self.level.model).add(node)
        await session.commit()
        logger.info(f"Created {self.level.label.lower()} {node.id} under {self.level.parent_label.lower()} {parent_id}")
        return node.to_dict()

    async def update(self, session: AsyncSession, node_id: int, payload: Dict[str, Any]) -> Dict:
        existing = await SqlAlchemyRepository(session, self.level.model).get_one(node_id)
        current_parent = getattr(existing, self.level.parent_field)

        new_parent = payload.get(self.level.parent_field)
        parent_changed = new_parent is not None and new_parent != current_parent
        if parent_changed:
            await self._ensure_parent(session, new_parent)

        new_order = payload.get("order_index")
        if new_order is None and parent_changed:
            new_order = existing.order_index
        if new_order is not None and (new_order != existing.order_index or parent_changed):
            await self._ensure_free_order_index(
                session, new_parent if parent_changed else current_parent, new_order, exclude_id=node_id
            )

        node = await SqlAlchemyRepository(session, self.level.model).update(
            node_id, CatalogRules.prepare_update(payload)
        )
        await session.commit()
        return node.to_dict()

    async def delete(self, session: AsyncSession, node_id: int) -> Dict:
        repo = SqlAlchemyRepository(session, self.level.model)
        await repo.get_one(node_id)
        await repo.delete(node_id)
        await session.commit()
        logger.info(f"Deleted {self.level.label.lower()} {node_id}")
        return {"message": f"{self.level.label} deleted successfully"}


book_service = BookService()
volume_service = CatalogLevelService(VOLUMES)
saga_service = CatalogLevelService(SAGAS)
arc_service = CatalogLevelService(ARCS)
issue_service = CatalogLevelService(ISSUES)
