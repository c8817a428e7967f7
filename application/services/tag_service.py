import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from adapters.persistence.sqlite.unit_of_work import SqlAlchemyUnitOfWork
from app.core.errors import ConflictError, NotFoundError
from app.models.character import Character, CharacterTag, CharacterTagAssignment

logger = logging.getLogger(__name__)

TAG_SUMMARY_FIELDS = ("id", "name", "description", "category", "color", "icon", "usage_count")


def assignment_dict(assignment: CharacterTagAssignment) -> Dict[str, Any]:
    data = assignment.to_dict()
    tag = assignment.tag
    data["character_tags"] = {field: getattr(tag, field) for field in TAG_SUMMARY_FIELDS} if tag else None
    return data


class TagService:
    async def list_tags(
        self,
        session: AsyncSession,
        search: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Dict[str, Any]:
        conditions = []
        if search:
            conditions.append(CharacterTag.name.ilike(f"%{search}%"))
        if category:
            conditions.append(CharacterTag.category == category)

        total = (
            await session.execute(select(func.count()).select_from(CharacterTag).where(*conditions))
        ).scalar_one()
        stmt = (
            select(CharacterTag)
            .where(*conditions)
            .order_by(CharacterTag.usage_count.desc(), CharacterTag.name.asc())
            .limit(limit)
            .offset(offset)
        )
        tags = (await session.execute(stmt)).scalars().all()
        return {
            "data": [tag.to_dict() for tag in tags],
            "pagination": {"offset": offset, "limit": limit, "total": total},
        }

    async def create_tag(self, session: AsyncSession, data: Dict[str, Any]) -> Dict:
        name = data["name"].strip()
        existing = await session.execute(select(CharacterTag.id).where(CharacterTag.name == name))
        if existing.first() is not None:
            raise ConflictError("Tag already exists")

        tag = CharacterTag(**{**data, "name": name, "usage_count": 0})
        session.add(tag)
        await session.commit()
        logger.info(f"Created character tag {tag.id} ({tag.name})")
        return tag.to_dict()

    async def list_assignments(self, session: AsyncSession, character_id: int) -> List[Dict]:
        stmt = (
            select(CharacterTagAssignment)
            .where(CharacterTagAssignment.character_id == character_id)
            .options(selectinload(CharacterTagAssignment.tag))
            .order_by(CharacterTagAssignment.id)
            .execution_options(populate_existing=True)
        )
        return [assignment_dict(a) for a in (await session.execute(stmt)).scalars().all()]

    async def replace_assignments(self, session: AsyncSession, data: Dict[str, Any]) -> List[Dict]:
        """
        Replaces the character's whole tag set in one transaction: a failure
        part way leaves the previous assignments in place.
        """
        character_id = data["character_id"]
        tag_ids = list(dict.fromkeys(data["tag_ids"]))

        if await session.get(Character, character_id) is None:
            raise NotFoundError("Character not found")
        if tag_ids:
            found = await session.execute(select(CharacterTag.id).where(CharacterTag.id.in_(tag_ids)))
            missing = sorted(set(tag_ids) - set(found.scalars().all()))
            if missing:
                raise NotFoundError("Tag not found", tag_ids=missing)

        async with SqlAlchemyUnitOfWork(session) as uow:
            previous = await session.execute(
                select(CharacterTagAssignment.tag_id).where(CharacterTagAssignment.character_id == character_id)
            )
            touched = set(previous.scalars().all()) | set(tag_ids)

            await session.execute(
                delete(CharacterTagAssignment).where(CharacterTagAssignment.character_id == character_id)
            )
            repo = uow.repository(CharacterTagAssignment)
            for tag_id in tag_ids:
                await repo.add(
                    CharacterTagAssignment(
                        character_id=character_id,
                        tag_id=tag_id,
                        confidence=data.get("confidence", 1.0),
                        assigned_by=data.get("assigned_by") or "manual",
                        notes=data.get("notes"),
                        created_by=data.get("created_by"),
                    )
                )
            await self._refresh_usage_counts(session, touched)

        logger.info(f"Character {character_id} now has {len(tag_ids)} tags")
        return await self.list_assignments(session, character_id)

    async def _refresh_usage_counts(self, session: AsyncSession, tag_ids) -> None:
        for tag_id in tag_ids:
            usage = (
                select(func.count())
                .select_from(CharacterTagAssignment)
                .where(CharacterTagAssignment.tag_id == tag_id)
                .scalar_subquery()
            )
            await session.execute(
                update(CharacterTag)
                .where(CharacterTag.id == tag_id)
                .values(usage_count=usage)
                .execution_options(synchronize_session=False)
            )


tag_service = TagService()
