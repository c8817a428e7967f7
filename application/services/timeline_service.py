from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from adapters.persistence.sqlite.base_repository import SqlAlchemyRepository
from app.models.timeline import TimelineEvent
from domain.rules.catalog_rules import CatalogRules


class TimelineService:
    async def list_events(self, session: AsyncSession) -> List[Dict]:
        events = await SqlAlchemyRepository(session, TimelineEvent).list(
            limit=10000, order_by=(TimelineEvent.date.asc(), TimelineEvent.id.asc())
        )
        return [event.to_dict() for event in events]

    async def create_event(self, session: AsyncSession, data: Dict[str, Any]) -> Dict:
        event = await SqlAlchemyRepository(session, TimelineEvent).add(TimelineEvent(**data))
        await session.commit()
        return event.to_dict()

    async def update_event(self, session: AsyncSession, payload: Dict[str, Any]) -> Dict:
        event_id = payload.pop("id")
        event = await SqlAlchemyRepository(session, TimelineEvent).update(
            event_id, CatalogRules.prepare_update(payload)
        )
        await session.commit()
        return event.to_dict()

    async def delete_event(self, session: AsyncSession, event_id: int) -> Dict:
        repo = SqlAlchemyRepository(session, TimelineEvent)
        await repo.get_one(event_id)
        await repo.delete(event_id)
        await session.commit()
        return {"message": "Timeline event deleted successfully"}


timeline_service = TimelineService()
