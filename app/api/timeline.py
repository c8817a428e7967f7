from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import admin_rate_limited, get_db
from app.core.auth import AuthUser
from app.core.errors import BadRequestError, handle_errors
from app.schemas.content import TimelineEventCreate, TimelineEventUpdate
from application.services.timeline_service import timeline_service

router = APIRouter()

EVENT_NOT_FOUND = "Timeline event not found"


@router.get("")
async def list_events(db: AsyncSession = Depends(get_db)):
    with handle_errors():
        return await timeline_service.list_events(db)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    body: TimelineEventCreate,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors():
        return await timeline_service.create_event(db, body.model_dump())


@router.put("")
async def update_event(
    body: TimelineEventUpdate,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors(not_found=EVENT_NOT_FOUND):
        return await timeline_service.update_event(db, body.model_dump(exclude_unset=True))


@router.delete("")
async def delete_event(
    id: Optional[int] = None,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors(not_found=EVENT_NOT_FOUND):
        if id is None:
            raise BadRequestError("ID is required")
        return await timeline_service.delete_event(db, id)
