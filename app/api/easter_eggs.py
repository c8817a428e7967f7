from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_user_db, require_auth
from app.core.auth import AuthUser
from app.core.errors import handle_errors
from app.schemas.reader import EggUnlockRequest
from application.services.easter_egg_service import easter_egg_service

router = APIRouter()


@router.get("")
async def list_easter_eggs(
    item_id: int,
    item_type: str,
    admin_mode: bool = False,
    inline_mode: bool = False,
    user: AuthUser = Depends(require_auth),
    db: AsyncSession = Depends(get_user_db),
):
    """``admin_mode`` is ignored for callers without the admin role."""
    with handle_errors():
        easter_egg_service.ensure_enabled()
        return await easter_egg_service.list_for_item(
            db,
            user.id,
            item_id,
            item_type,
            admin_mode=admin_mode and user.is_admin,
            inline_mode=inline_mode,
        )


@router.post("/unlock")
async def unlock_easter_egg(
    body: EggUnlockRequest,
    response: Response,
    user: AuthUser = Depends(require_auth),
    db: AsyncSession = Depends(get_user_db),
):
    with handle_errors():
        easter_egg_service.ensure_enabled()
        result, created = await easter_egg_service.unlock(db, user.id, body.model_dump())
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return result
