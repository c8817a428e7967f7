from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import admin_rate_limited, get_db
from app.core.auth import AuthUser
from app.core.errors import BadRequestError, handle_errors
from app.schemas.characters import TagAssignmentRequest, TagCreate
from application.services.tag_service import tag_service

router = APIRouter()


@router.get("")
async def list_tags(
    search: Optional[str] = None,
    category: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors():
        return await tag_service.list_tags(db, search, category, limit, offset)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tag(body: TagCreate, admin: AuthUser = Depends(admin_rate_limited), db: AsyncSession = Depends(get_db)):
    with handle_errors():
        return await tag_service.create_tag(db, body.model_dump())


@router.get("/assignments")
async def list_assignments(character_id: Optional[int] = None, db: AsyncSession = Depends(get_db)):
    with handle_errors():
        if character_id is None:
            raise BadRequestError("character_id is required")
        return await tag_service.list_assignments(db, character_id)


@router.post("/assignments", status_code=status.HTTP_201_CREATED)
async def replace_assignments(
    body: TagAssignmentRequest,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    """The submitted ``tag_ids`` become the character's complete tag set."""
    with handle_errors():
        return await tag_service.replace_assignments(db, body.model_dump())
