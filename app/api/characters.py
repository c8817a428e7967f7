import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import admin_rate_limited, get_db
from app.core.auth import AuthUser
from app.core.container import container
from app.core.errors import BadRequestError, handle_errors
from app.schemas.characters import (
    BulkImportRequest,
    CharacterCreate,
    CharacterUpdate,
    RelationshipCreate,
    TemplateRequest,
)
from application.services.character_service import character_service

router = APIRouter()
logger = logging.getLogger(__name__)

CHARACTER_NOT_FOUND = "Character not found"


def _parse_ids(ids: Optional[str]):
    if not ids:
        return None
    return [int(part) for part in ids.split(",") if part.strip().isdigit()]


@router.get("")
async def list_characters(
    search: Optional[str] = None,
    status: Optional[str] = None,
    importance: Optional[str] = None,
    sort: str = "created_at",
    order: str = "desc",
    limit: int = Query(default=50, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    ids: Optional[str] = None,
    format: str = "json",
    db: AsyncSession = Depends(get_db),
):
    with handle_errors():
        if format not in ("json", "csv"):
            raise BadRequestError("format must be json or csv")
        characters = await character_service.list_characters(
            db, search, status, importance, sort, order, limit, offset, _parse_ids(ids)
        )

    if format == "csv":
        return Response(
            content=character_service.export_csv(characters),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="characters.csv"'},
        )
    return characters


@router.post("", status_code=201)
async def create_character(
    body: CharacterCreate,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors():
        return await character_service.create_character(db, body.model_dump())


@router.post("/bulk-import")
async def bulk_import(
    body: BulkImportRequest,
    response: Response,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    """Preview by default; ``confirm: true`` inserts the valid rows."""
    with handle_errors():
        result, created = await character_service.bulk_import(db, body.model_dump())
    if created:
        response.status_code = 201
    return result


@router.get("/relationships")
async def list_relationships(
    character_id: Optional[int] = None,
    type: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors():
        return await character_service.list_relationships(db, character_id, type, status, limit, offset)


@router.post("/relationships", status_code=201)
async def create_relationship(
    body: RelationshipCreate,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors():
        return await character_service.create_relationship(db, body.model_dump())


@router.get("/templates")
async def list_templates(type: Optional[str] = None):
    with handle_errors():
        return container.template_service.get_templates(type)


@router.post("/templates")
async def instantiate_template(body: TemplateRequest):
    with handle_errors():
        return container.template_service.instantiate(body.type, body.customizations)


@router.get("/{character_id}")
async def get_character(
    character_id: int,
    include_relationships: bool = False,
    include_timeline: bool = False,
    db: AsyncSession = Depends(get_db),
):
    with handle_errors(not_found=CHARACTER_NOT_FOUND):
        return await character_service.get_character(db, character_id, include_relationships, include_timeline)


@router.put("/{character_id}")
async def update_character(
    character_id: int,
    body: CharacterUpdate,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors(not_found=CHARACTER_NOT_FOUND):
        return await character_service.update_character(db, character_id, body.model_dump(exclude_unset=True))


@router.delete("/{character_id}")
async def delete_character(
    character_id: int,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors(not_found=CHARACTER_NOT_FOUND):
        return await character_service.delete_character(db, character_id)
