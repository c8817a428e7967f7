from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import admin_rate_limited, get_db
from app.core.auth import AuthUser
from app.core.errors import handle_errors
from app.schemas.content import PostCreate, PostUpdate
from application.services.post_service import post_service

router = APIRouter()

POST_NOT_FOUND = "Post not found"


@router.get("/posts")
async def list_posts(
    category: Optional[str] = None,
    tag: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors():
        return await post_service.list_published(db, category, tag, page, limit)


@router.get("/posts/{slug}")
async def get_post(slug: str, db: AsyncSession = Depends(get_db)):
    with handle_errors(not_found=POST_NOT_FOUND):
        return await post_service.get_published(db, slug)


@router.get("/admin/posts")
async def list_all_posts(admin: AuthUser = Depends(admin_rate_limited), db: AsyncSession = Depends(get_db)):
    with handle_errors():
        return await post_service.list_all(db)


@router.post("/admin/posts", status_code=status.HTTP_201_CREATED)
async def create_post(body: PostCreate, admin: AuthUser = Depends(admin_rate_limited), db: AsyncSession = Depends(get_db)):
    with handle_errors():
        return await post_service.create_post(db, body.model_dump(), author_id=admin.id)


@router.put("/admin/posts/{post_id}")
async def update_post(
    post_id: int,
    body: PostUpdate,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors(not_found=POST_NOT_FOUND):
        return await post_service.update_post(db, post_id, body.model_dump(exclude_unset=True))


@router.delete("/admin/posts/{post_id}")
async def delete_post(post_id: int, admin: AuthUser = Depends(admin_rate_limited), db: AsyncSession = Depends(get_db)):
    with handle_errors(not_found=POST_NOT_FOUND):
        return await post_service.delete_post(db, post_id)
