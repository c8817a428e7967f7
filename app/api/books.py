import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, require_admin, require_auth
from app.core.auth import AuthUser
from app.core.errors import handle_errors
from app.schemas.catalog import BookCreate, BookUpdate
from application.services.catalog_service import book_service

router = APIRouter()
logger = logging.getLogger(__name__)

BOOK_NOT_FOUND = "Book not found"


@router.get("")
async def list_books(
    filter: Optional[str] = Query(default=None),
    user: AuthUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Books with their nested volumes, sagas, arcs and issues."""
    with handle_errors():
        return await book_service.list_books(db, filter)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_book(
    body: BookCreate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors():
        return await book_service.create_book(db, body.model_dump())


@router.get("/{book_id}")
async def get_book(book_id: int, user: AuthUser = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    with handle_errors(not_found=BOOK_NOT_FOUND):
        return await book_service.get_book(db, book_id)


@router.put("/{book_id}")
async def update_book(
    book_id: int,
    body: BookUpdate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors(not_found=BOOK_NOT_FOUND):
        return await book_service.update_book(db, book_id, body.model_dump(exclude_unset=True))


@router.delete("/{book_id}")
async def delete_book(book_id: int, admin: AuthUser = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    with handle_errors(not_found=BOOK_NOT_FOUND):
        return await book_service.delete_book(db, book_id)
