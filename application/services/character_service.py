import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from adapters.persistence.sqlite.base_repository import SqlAlchemyRepository
from adapters.persistence.sqlite.unit_of_work import SqlAlchemyUnitOfWork
from app.core.errors import BadRequestError, NotFoundError
from app.models.catalog import Arc, Book, Saga, Volume
from app.models.character import Character, CharacterRelationship
from domain.rules.catalog_rules import CatalogRules
from domain.rules.character_rules import IMPORT_PREVIEW_ROWS, CharacterImportError, CharacterRules

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = ("id", "name", "status", "importance_level", "created_at", "updated_at")

RELATIONSHIP_SUMMARY_FIELDS = (
    "id",
    "related_character_id",
    "relationship_type",
    "relationship_subtype",
    "strength",
    "status",
)


def _character_ref(character: Optional[Character]) -> Optional[Dict[str, Any]]:
    if character is None:
        return None
    return {"id": character.id, "name": character.name, "avatar_url": character.avatar_url}


def relationship_dict(relationship: CharacterRelationship) -> Dict[str, Any]:
    data = relationship.to_dict()
    data["character"] = _character_ref(relationship.character)
    data["related_character"] = _character_ref(relationship.related_character)
    return data


class CharacterService:
    async def list_characters(
        self,
        session: AsyncSession,
        search: Optional[str] = None,
        status: Optional[str] = None,
        importance: Optional[str] = None,
        sort: str = "created_at",
        order: str = "desc",
        limit: int = 50,
        offset: int = 0,
        ids: Optional[List[int]] = None,
    ) -> List[Dict]:
        stmt = select(Character).options(selectinload(Character.relationships))
        if ids:
            stmt = stmt.where(Character.id.in_(ids))
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Character.name.ilike(pattern),
                    Character.description.ilike(pattern),
                    cast(Character.aliases, String).ilike(pattern),
                    cast(Character.skills, String).ilike(pattern),
                    cast(Character.tags, String).ilike(pattern),
                )
            )
        if status:
            stmt = stmt.where(Character.status == status)

        if importance == "main":
            stmt = stmt.where(Character.is_main_character.is_(True))
        elif importance == "protagonist":
            stmt = stmt.where(Character.is_protagonist.is_(True))
        elif importance == "antagonist":
            stmt = stmt.where(Character.is_antagonist.is_(True))
        elif importance and importance.isdigit():
            stmt = stmt.where(Character.importance_level == int(importance))

        column = getattr(Character, sort if sort in SORTABLE_COLUMNS else "created_at")
        ordering = column.asc() if order.lower() == "asc" else column.desc()
        stmt = stmt.order_by(ordering, Character.id).limit(limit).offset(offset)

        characters = (await session.execute(stmt)).scalars().all()
        listed = []
        for character in characters:
            data = character.to_dict()
            data["character_relationships"] = [
                {field: getattr(rel, field) for field in RELATIONSHIP_SUMMARY_FIELDS}
                for rel in character.relationships
            ]
            listed.append(data)
        return listed

    def export_csv(self, characters: List[Dict]) -> str:
        return CharacterRules.to_csv(characters)

    async def create_character(self, session: AsyncSession, data: Dict[str, Any]) -> Dict:
        character = Character(**{k: v for k, v in data.items() if v is not None})
        await SqlAlchemyRepository(session, Character).add(character)
        await session.commit()
        logger.info(f"Created character {character.id} ({character.name})")
        return character.to_dict()

    async def get_character(
        self,
        session: AsyncSession,
        character_id: int,
        include_relationships: bool = False,
        include_timeline: bool = False,
    ) -> Dict:
        stmt = select(Character).where(Character.id == character_id)
        if include_relationships:
            stmt = stmt.options(selectinload(Character.relationships), selectinload(Character.related_relationships))
        character = (await session.execute(stmt)).scalar_one()

        data = character.to_dict()
        if include_relationships:
            data["character_relationships"] = [rel.to_dict() for rel in character.relationships]
            data["related_relationships"] = [rel.to_dict() for rel in character.related_relationships]
        if include_timeline:
            data["appearance_timeline"] = await self.appearance_timeline(session)
        return data

    async def appearance_timeline(self, session: AsyncSession) -> List[Dict]:
        """One entry per issue of every published book, walked in reading order."""
        stmt = (
            select(Book)
            .where(Book.status == "published")
            .options(selectinload(Book.volumes).selectinload(Volume.sagas).selectinload(Saga.arcs).selectinload(Arc.issues))
            .order_by(Book.id)
        )
        books = (await session.execute(stmt)).scalars().all()

        timeline = []
        for book in books:
            for volume in book.volumes:
                for saga in volume.sagas:
                    for arc in saga.arcs:
                        for issue in arc.issues:
                            timeline.append(
                                {
                                    "id": f"{book.id}-{volume.id}-{saga.id}-{arc.id}-{issue.id}",
                                    "book": book.title,
                                    "volume": volume.title,
                                    "saga": saga.title,
                                    "arc": arc.title,
                                    "issue": issue.title,
                                    "order_index": issue.order_index,
                                    "description": f"Character appears in {issue.title}",
                                    "significance": "Story progression",
                                }
                            )
        return timeline

    async def update_character(self, session: AsyncSession, character_id: int, payload: Dict[str, Any]) -> Dict:
        character = await SqlAlchemyRepository(session, Character).update(
            character_id, CatalogRules.prepare_update(payload)
        )
        await session.commit()
        return character.to_dict()

    async def delete_character(self, session: AsyncSession, character_id: int) -> Dict:
        repo = SqlAlchemyRepository(session, Character)
        await repo.get_one(character_id)
        await repo.delete(character_id)
        await session.commit()
        logger.info(f"Deleted character {character_id}")
        return {"message": "Character deleted successfully"}

    async def bulk_import(self, session: AsyncSession, data: Dict[str, Any]) -> tuple:
        """
        Parses CSV or JSON content into characters. Without ``confirm`` only a
        preview is returned; with it every valid row is inserted in one
        transaction. Returns ``(body, created)``.
        """
        try:
            rows = CharacterRules.parse_rows(data["content"], data["format"])
        except CharacterImportError as e:
            raise BadRequestError(str(e)) from e
        if not rows:
            raise BadRequestError("Invalid file format or no data found")

        rows = CharacterRules.apply_field_mapping(rows, data.get("field_mapping"))
        characters = CharacterRules.valid_imports(rows)

        if not data.get("confirm"):
            return (
                {
                    "preview": True,
                    "message": "Preview of import data",
                    "totalRows": len(rows),
                    "validRows": len(characters),
                    "invalidRows": len(rows) - len(characters),
                    "characters": characters[:IMPORT_PREVIEW_ROWS],
                },
                False,
            )

        if not characters:
            raise BadRequestError("No valid characters found in import data")

        async with SqlAlchemyUnitOfWork(session) as uow:
            repo = uow.repository(Character)
            for character in characters:
                await repo.add(Character(**character))

        logger.info(f"Imported {len(characters)} of {len(rows)} characters")
        return (
            {
                "message": f"Successfully imported {len(characters)} characters",
                "imported": len(characters),
                "total": len(rows),
                "skipped": len(rows) - len(characters),
            },
            True,
        )

    async def list_relationships(
        self,
        session: AsyncSession,
        character_id: Optional[int] = None,
        relationship_type: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Dict[str, Any]:
        conditions = []
        if character_id is not None:
            conditions.append(
                or_(
                    CharacterRelationship.character_id == character_id,
                    CharacterRelationship.related_character_id == character_id,
                )
            )
        if relationship_type:
            conditions.append(CharacterRelationship.relationship_type == relationship_type)
        if status:
            conditions.append(CharacterRelationship.status == status)

        total_stmt = select(func.count()).select_from(CharacterRelationship).where(*conditions)
        total = (await session.execute(total_stmt)).scalar_one()

        stmt = (
            select(CharacterRelationship)
            .where(*conditions)
            .options(
                selectinload(CharacterRelationship.character),
                selectinload(CharacterRelationship.related_character),
            )
            .order_by(CharacterRelationship.created_at.desc(), CharacterRelationship.id.desc())
            .limit(limit)
            .offset(offset)
        )
        relationships = (await session.execute(stmt)).scalars().all()
        return {
            "data": [relationship_dict(rel) for rel in relationships],
            "pagination": {"offset": offset, "limit": limit, "total": total},
        }

    async def create_relationship(self, session: AsyncSession, data: Dict[str, Any]) -> Dict:
        if data["character_id"] == data["related_character_id"]:
            raise BadRequestError("A character cannot have a relationship with themselves")

        found = await session.execute(
            select(func.count())
            .select_from(Character)
            .where(Character.id.in_([data["character_id"], data["related_character_id"]]))
        )
        if found.scalar_one() < 2:
            raise NotFoundError("Character not found")

        async with SqlAlchemyUnitOfWork(session) as uow:
            repo = uow.repository(CharacterRelationship)
            relationship = await repo.add(CharacterRelationship(**data))
            if data.get("is_mutual"):
                reverse = {
                    **data,
                    "character_id": data["related_character_id"],
                    "related_character_id": data["character_id"],
                    "is_mutual": True,
                }
                await repo.add(CharacterRelationship(**reverse))

        stmt = (
            select(CharacterRelationship)
            .where(CharacterRelationship.id == relationship.id)
            .options(
                selectinload(CharacterRelationship.character),
                selectinload(CharacterRelationship.related_character),
            )
            .execution_options(populate_existing=True)
        )
        stored = (await session.execute(stmt)).scalar_one()
        return relationship_dict(stored)


character_service = CharacterService()
