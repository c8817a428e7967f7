import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import ForbiddenError, NotFoundError
from app.models.easter_egg import EasterEgg, UserEasterEggDiscovery
from domain.rules.egg_rules import EggRules

logger = logging.getLogger(__name__)


class EasterEggService:
    def ensure_enabled(self) -> None:
        if not settings.EASTER_EGGS_ENABLED:
            raise ForbiddenError("Easter eggs are disabled")

    async def list_for_item(
        self,
        session: AsyncSession,
        user_id: str,
        item_id: int,
        item_type: str,
        admin_mode: bool = False,
        inline_mode: bool = False,
    ) -> List[Dict]:
        stmt = (
            select(EasterEgg)
            .where(EasterEgg.item_id == item_id, EasterEgg.item_type == item_type)
            .order_by(EasterEgg.id)
        )
        eggs = (await session.execute(stmt)).scalars().all()

        discovered_stmt = select(UserEasterEggDiscovery.easter_egg_id).where(UserEasterEggDiscovery.user_id == user_id)
        discovered = set((await session.execute(discovered_stmt)).scalars().all())

        now = datetime.now(timezone.utc)
        visible = []
        for egg in eggs:
            data = egg.to_dict()
            if not EggRules.is_visible(data, item_type, admin_mode=admin_mode, inline_mode=inline_mode, now=now):
                continue
            data["discovered"] = egg.id in discovered
            visible.append(data)
        return visible

    async def _find_discovery(self, session: AsyncSession, user_id: str, egg_id: int):
        stmt = select(UserEasterEggDiscovery).where(
            UserEasterEggDiscovery.user_id == user_id,
            UserEasterEggDiscovery.easter_egg_id == egg_id,
        )
        return (await session.execute(stmt)).scalars().first()

    async def unlock(self, session: AsyncSession, user_id: str, data: Dict[str, Any]) -> tuple:
        """
        Insert-if-absent discovery. Returns ``(body, created)``; a repeat unlock
        reports the same reward with ``alreadyUnlocked`` instead of failing.
        """
        stmt = select(EasterEgg).where(
            EasterEgg.id == data["egg_id"],
            EasterEgg.item_id == data["item_id"],
            EasterEgg.item_type == data["item_type"],
        )
        egg = (await session.execute(stmt)).scalars().first()
        now = datetime.now(timezone.utc)
        if egg is None or not EggRules.is_available(egg.is_active, egg.available_from, egg.available_until, now):
            raise NotFoundError("Easter egg not found or not active")

        egg_data = egg.to_dict()
        existing = await self._find_discovery(session, user_id, egg.id)
        if existing is None:
            discovery = UserEasterEggDiscovery(
                user_id=user_id,
                easter_egg_id=egg.id,
                discovered_at=now,
                discovery_method=data.get("discovery_method") or "click",
                hints_used=data.get("hints_used") or 0,
            )
            session.add(discovery)
            try:
                await session.commit()
            except IntegrityError:
                # A concurrent unlock won the unique (user, egg) row.
                await session.rollback()
                existing = await self._find_discovery(session, user_id, egg.id)
                if existing is None:
                    raise
            else:
                logger.info(f"{user_id} discovered easter egg {egg.id}")
                return (
                    {
                        "message": "Easter egg unlocked!",
                        "success": True,
                        "alreadyUnlocked": False,
                        "discovery": discovery.to_dict(),
                        "egg": EggRules.reward_summary(egg_data),
                    },
                    True,
                )

        return (
            {
                "message": "Easter egg already unlocked",
                "success": True,
                "alreadyUnlocked": True,
                "egg": EggRules.reward_summary(egg_data, include_art=False),
            },
            False,
        )


easter_egg_service = EasterEggService()
