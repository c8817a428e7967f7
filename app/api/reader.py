import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_user_db, require_auth
from app.core.auth import AuthUser
from app.core.errors import handle_errors
from app.core.rate_limit import RateLimitBucket, apply_rate_limit
from app.schemas.reader import ChooseRouteRequest, ProgressUpdate, ReviewCreate, ReviewUpdate
from application.services.progress_service import progress_service
from application.services.review_service import review_service

router = APIRouter()
logger = logging.getLogger(__name__)


async def _rate_limit(bucket: RateLimitBucket, user: AuthUser) -> None:
    if not await apply_rate_limit(bucket, user.id):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Too many requests")


@router.get("/reviews")
async def list_reviews(
    item_id: Optional[int] = None,
    item_type: Optional[str] = None,
    user_id: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    user: AuthUser = Depends(require_auth),
    db: AsyncSession = Depends(get_user_db),
):
    with handle_errors():
        return await review_service.list_reviews(db, item_id, item_type, user_id, limit, offset)


@router.post("/reviews", status_code=status.HTTP_201_CREATED)
async def create_review(
    body: ReviewCreate,
    user: AuthUser = Depends(require_auth),
    db: AsyncSession = Depends(get_user_db),
):
    await _rate_limit(RateLimitBucket.REVIEW, user)
    with handle_errors():
        return await review_service.create_review(db, user.id, body.model_dump())


@router.put("/reviews/{review_id}")
async def update_review(
    review_id: int,
    body: ReviewUpdate,
    user: AuthUser = Depends(require_auth),
    db: AsyncSession = Depends(get_user_db),
):
    await _rate_limit(RateLimitBucket.REVIEW, user)
    with handle_errors(not_found="Review not found"):
        return await review_service.update_review(db, user.id, review_id, body.model_dump(exclude_unset=True))


@router.delete("/reviews/{review_id}")
async def delete_review(review_id: int, user: AuthUser = Depends(require_auth), db: AsyncSession = Depends(get_user_db)):
    with handle_errors(not_found="Review not found"):
        return await review_service.delete_review(db, user.id, review_id)


@router.get("/progress")
async def list_progress(
    item_id: Optional[int] = None,
    item_type: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    user: AuthUser = Depends(require_auth),
    db: AsyncSession = Depends(get_user_db),
):
    with handle_errors():
        return await progress_service.list_progress(db, user.id, item_id, item_type, limit, offset)


@router.patch("/progress")
async def record_progress(
    body: ProgressUpdate,
    response: Response,
    user: AuthUser = Depends(require_auth),
    db: AsyncSession = Depends(get_user_db),
):
    """Upsert; answers 201 when the record is new and 200 otherwise."""
    await _rate_limit(RateLimitBucket.PROGRESS, user)
    with handle_errors():
        progress, created = await progress_service.record_progress(db, user.id, body.model_dump(exclude_unset=True))
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return progress


@router.get("/choose-route")
async def list_routes(
    item_id: int,
    item_type: str,
    user: AuthUser = Depends(require_auth),
    db: AsyncSession = Depends(get_user_db),
):
    with handle_errors():
        return await progress_service.list_routes(db, user.id, item_id, item_type)


@router.post("/choose-route")
async def choose_route(
    body: ChooseRouteRequest,
    user: AuthUser = Depends(require_auth),
    db: AsyncSession = Depends(get_user_db),
):
    await _rate_limit(RateLimitBucket.PROGRESS, user)
    with handle_errors():
        return await progress_service.choose_route(db, user.id, body.model_dump())
