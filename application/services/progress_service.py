import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, ForbiddenError, NotFoundError
from app.models.reader import StoryRoute, UserProgress
from domain.rules.catalog_rules import CatalogRules
from domain.rules.reader_rules import ReaderRules

logger = logging.getLogger(__name__)

ROUTE_SUMMARY_FIELDS = (
    "id",
    "route_key",
    "title",
    "description",
    "difficulty_level",
    "estimated_duration",
    "completion_rewards",
    "narrative_impact",
)


class ProgressService:
    async def _find(self, session: AsyncSession, user_id: str, item_id: int, item_type: str) -> Optional[UserProgress]:
        stmt = select(UserProgress).where(
            UserProgress.user_id == user_id,
            UserProgress.item_id == item_id,
            UserProgress.item_type == item_type,
        )
        return (await session.execute(stmt)).scalars().first()

    async def list_progress(
        self,
        session: AsyncSession,
        user_id: str,
        item_id: Optional[int] = None,
        item_type: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Dict]:
        stmt = (
            select(UserProgress)
            .where(UserProgress.user_id == user_id)
            .order_by(UserProgress.last_accessed.desc(), UserProgress.id.desc())
        )
        if item_id is not None:
            stmt = stmt.where(UserProgress.item_id == item_id)
        if item_type:
            stmt = stmt.where(UserProgress.item_type == item_type)
        result = await session.execute(stmt.limit(limit).offset(offset))
        return [row.to_dict() for row in result.scalars().all()]

    async def record_progress(self, session: AsyncSession, user_id: str, data: Dict[str, Any]) -> tuple:
        """
        Upserts the caller's progress on one item.
        Returns ``(progress, created)`` so the route can answer 201 or 200.
        """
        if not CatalogRules.is_valid_item_type(data["item_type"]):
            raise BadRequestError(CatalogRules.invalid_item_type_message())
        if not ReaderRules.is_valid_percent(data.get("percent_complete")):
            raise BadRequestError("percent_complete must be between 0 and 100")

        existing = await self._find(session, user_id, data["item_id"], data["item_type"])
        change = ReaderRules.progress_change(
            existing.to_dict() if existing else None,
            data,
            datetime.now(timezone.utc),
        )

        if existing is None:
            progress = UserProgress(user_id=user_id, item_id=data["item_id"], item_type=data["item_type"], **change.values)
            session.add(progress)
        else:
            progress = existing
            for key, value in change.values.items():
                setattr(progress, key, value)

        await session.commit()
        return progress.to_dict(), change.created

    async def list_routes(self, session: AsyncSession, user_id: str, item_id: int, item_type: str) -> List[Dict]:
        stmt = (
            select(StoryRoute)
            .where(StoryRoute.item_id == item_id, StoryRoute.item_type == item_type)
            .order_by(StoryRoute.order_index)
        )
        routes = (await session.execute(stmt)).scalars().all()
        progress = await self._find(session, user_id, item_id, item_type)
        percent = progress.percent_complete if progress else None
        position = progress.last_position if progress else None

        listed = []
        for route in routes:
            data = route.to_dict()
            data["is_unlocked"] = ReaderRules.route_unlocked(data, percent)
            data["is_current"] = position == ReaderRules.route_position(route.route_key)
            listed.append(data)
        return listed

    async def choose_route(self, session: AsyncSession, user_id: str, data: Dict[str, Any]) -> Dict:
        stmt = select(StoryRoute).where(
            StoryRoute.id == data["route_id"],
            StoryRoute.item_id == data["item_id"],
            StoryRoute.item_type == data["item_type"],
        )
        route = (await session.execute(stmt)).scalars().first()
        if route is None:
            raise NotFoundError("Story route not found")

        progress = await self._find(session, user_id, data["item_id"], data["item_type"])
        percent = progress.percent_complete if progress else None
        if not ReaderRules.route_unlocked(route.to_dict(), percent):
            raise ForbiddenError(
                "You must complete the previous content to unlock this route",
                unlock_hint=route.unlock_hint,
            )

        now = datetime.now(timezone.utc)
        position = ReaderRules.route_position(route.route_key)
        if progress is None:
            progress = UserProgress(
                user_id=user_id,
                item_id=data["item_id"],
                item_type=data["item_type"],
                percent_complete=0,
                last_position=position,
                started_at=now,
                last_accessed=now,
                total_reading_time=0,
                session_count=1,
            )
            session.add(progress)
        else:
            progress.last_position = position
            progress.last_accessed = now
            progress.session_count = (progress.session_count or 0) + 1

        await session.commit()
        logger.info(f"{user_id} chose route {route.route_key} on {data['item_type']}:{data['item_id']}")
        return {
            "message": "Story route chosen successfully",
            "route": {field: getattr(route, field) for field in ROUTE_SUMMARY_FIELDS},
            "progress": progress.to_dict(),
        }


progress_service = ProgressService()
