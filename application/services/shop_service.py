import logging
from collections import Counter
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.persistence.sqlite.base_repository import SqlAlchemyRepository
from app.core.errors import ApiError, BadRequestError, NotFoundError
from app.models.shop import ShopItem
from domain.rules.catalog_rules import CatalogRules
from domain.rules.hierarchy_rules import HierarchyCycleError, HierarchyRules
from domain.rules.pricing_rules import PricingRules

logger = logging.getLogger(__name__)

PUBLISHED = "published"


class ShopService:
    async def _published(self, session: AsyncSession) -> List[Dict]:
        stmt = select(ShopItem).where(ShopItem.status == PUBLISHED).order_by(ShopItem.order_index, ShopItem.id)
        result = await session.execute(stmt)
        return [item.to_dict() for item in result.scalars().all()]

    async def list_published(
        self, session: AsyncSession, parent_id: Optional[str] = None, item_type: Optional[str] = None
    ) -> List[Dict]:
        """``parent_id="null"`` selects roots; any other value selects that parent's children."""
        stmt = select(ShopItem).where(ShopItem.status == PUBLISHED).order_by(ShopItem.order_index, ShopItem.id)
        if parent_id == "null":
            stmt = stmt.where(ShopItem.parent_id.is_(None))
        elif parent_id:
            try:
                stmt = stmt.where(ShopItem.parent_id == int(parent_id))
            except ValueError as e:
                raise BadRequestError("parent_id must be an integer or 'null'") from e
        if item_type:
            stmt = stmt.where(ShopItem.type == item_type)
        result = await session.execute(stmt)
        return [item.to_dict() for item in result.scalars().all()]

    async def published_forest(self, session: AsyncSession) -> List[Dict]:
        items = await self._published(session)
        try:
            return HierarchyRules.build_forest(items)
        except HierarchyCycleError as e:
            logger.error(f"Shop hierarchy is corrupt: {e}")
            raise ApiError(str(e), item_ids=e.item_ids) from e

    async def list_all(self, session: AsyncSession) -> List[Dict]:
        items = await SqlAlchemyRepository(session, ShopItem).list(
            limit=10000, order_by=(ShopItem.order_index, ShopItem.id)
        )
        return [item.to_dict() for item in items]

    async def _ensure_parent(self, session: AsyncSession, parent_id: Optional[int]) -> None:
        if parent_id is not None and await session.get(ShopItem, parent_id) is None:
            raise NotFoundError("Parent item not found")

    async def create_item(self, session: AsyncSession, data: Dict[str, Any]) -> Dict:
        await self._ensure_parent(session, data.get("parent_id"))
        item = ShopItem(**{k: v for k, v in data.items() if v is not None})
        await SqlAlchemyRepository(session, ShopItem).add(item)
        await session.commit()
        logger.info(f"Created shop item {item.id} ({item.type})")
        return item.to_dict()

    async def update_item(self, session: AsyncSession, item_id: int, payload: Dict[str, Any]) -> Dict:
        repo = SqlAlchemyRepository(session, ShopItem)
        existing = await repo.get_one(item_id)

        new_parent = payload.get("parent_id")
        if new_parent is not None and new_parent != existing.parent_id:
            await self._ensure_parent(session, new_parent)
            all_items = {item["id"]: item for item in await self.list_all(session)}
            lineage = [new_parent] + [a["id"] for a in HierarchyRules.ancestors(all_items, new_parent)]
            if item_id in lineage:
                raise BadRequestError("A shop item cannot be moved under its own descendant")

        item = await repo.update(item_id, CatalogRules.prepare_update(payload))
        await session.commit()
        return item.to_dict()

    async def delete_item(self, session: AsyncSession, item_id: int) -> Dict:
        repo = SqlAlchemyRepository(session, ShopItem)
        await repo.get_one(item_id)
        await repo.delete(item_id)
        await session.commit()
        return {"message": "Shop item deleted successfully"}

    async def quote(self, session: AsyncSession, item_ids: List[int]) -> Dict:
        quantities = Counter(item_ids)
        stmt = (
            select(ShopItem)
            .where(ShopItem.id.in_(list(quantities)), ShopItem.status == PUBLISHED)
            .order_by(ShopItem.id)
        )
        items = [item.to_dict() for item in (await session.execute(stmt)).scalars().all()]

        missing = sorted(set(quantities) - {item["id"] for item in items})
        if missing:
            raise NotFoundError("Shop item not found", item_ids=missing)
        return asdict(PricingRules.quote(items, dict(quantities)))

    async def bundles_for(self, session: AsyncSession, item_id: int) -> List[Dict]:
        """Bundle offers for the item and every container above it, nearest first."""
        items = await self._published(session)
        by_id = {item["id"]: item for item in items}
        if item_id not in by_id:
            raise NotFoundError("Shop item not found")

        children: Dict[int, List[Dict]] = {}
        for item in items:
            if item.get("parent_id") is not None:
                children.setdefault(item["parent_id"], []).append(item)

        offers = []
        for node in [by_id[item_id]] + HierarchyRules.ancestors(by_id, item_id):
            offer = PricingRules.bundle_offer(
                node["id"],
                node["title"],
                node["type"],
                [child.get("price") or 0 for child in children.get(node["id"], [])],
            )
            if offer:
                offers.append(asdict(offer))
        return offers


shop_service = ShopService()
