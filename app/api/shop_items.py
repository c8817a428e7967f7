from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import admin_rate_limited, get_db
from app.core.auth import AuthUser
from app.core.errors import handle_errors
from app.schemas.shop import QuoteRequest, ShopItemCreate, ShopItemUpdate
from application.services.shop_service import shop_service

router = APIRouter()

ITEM_NOT_FOUND = "Shop item not found"


@router.get("/shop-items/hierarchy")
async def list_hierarchy(
    parent_id: Optional[str] = None,
    type: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Flat published items; ``parent_id=null`` returns the top level."""
    with handle_errors():
        return await shop_service.list_published(db, parent_id, type)


@router.post("/shop-items/hierarchy")
async def build_hierarchy(db: AsyncSession = Depends(get_db)):
    with handle_errors():
        return await shop_service.published_forest(db)


@router.get("/shop-items/{item_id}/bundles")
async def list_bundles(item_id: int, db: AsyncSession = Depends(get_db)):
    with handle_errors(not_found=ITEM_NOT_FOUND):
        return await shop_service.bundles_for(db, item_id)


@router.post("/shop/quote")
async def quote(body: QuoteRequest, db: AsyncSession = Depends(get_db)):
    with handle_errors():
        return await shop_service.quote(db, body.item_ids)


@router.get("/admin/shop-items")
async def list_items(admin: AuthUser = Depends(admin_rate_limited), db: AsyncSession = Depends(get_db)):
    with handle_errors():
        return await shop_service.list_all(db)


@router.post("/admin/shop-items", status_code=status.HTTP_201_CREATED)
async def create_item(
    body: ShopItemCreate,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors():
        return await shop_service.create_item(db, body.model_dump())


@router.put("/admin/shop-items/{item_id}")
async def update_item(
    item_id: int,
    body: ShopItemUpdate,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors(not_found=ITEM_NOT_FOUND):
        return await shop_service.update_item(db, item_id, body.model_dump(exclude_unset=True))


@router.delete("/admin/shop-items/{item_id}")
async def delete_item(item_id: int, admin: AuthUser = Depends(admin_rate_limited), db: AsyncSession = Depends(get_db)):
    with handle_errors(not_found=ITEM_NOT_FOUND):
        return await shop_service.delete_item(db, item_id)
