import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import BadRequestError, ConflictError, ForbiddenError
from app.models.reader import Review
from domain.rules.catalog_rules import CatalogRules
from domain.rules.reader_rules import ReaderRules

logger = logging.getLogger(__name__)


def review_dict(review: Review) -> Dict[str, Any]:
    data = review.to_dict()
    user = review.user
    data["user"] = {"id": user.id, "email": user.email, "role": user.role} if user else None
    return data


class ReviewService:
    async def list_reviews(
        self,
        session: AsyncSession,
        item_id: Optional[int] = None,
        item_type: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Dict]:
        stmt = select(Review).options(selectinload(Review.user)).order_by(Review.created_at.desc(), Review.id.desc())
        if item_id is not None:
            stmt = stmt.where(Review.item_id == item_id)
        if item_type:
            stmt = stmt.where(Review.item_type == item_type)
        if user_id:
            stmt = stmt.where(Review.user_id == user_id)
        result = await session.execute(stmt.limit(limit).offset(offset))
        return [review_dict(review) for review in result.scalars().all()]

    async def create_review(self, session: AsyncSession, user_id: str, data: Dict[str, Any]) -> Dict:
        if not CatalogRules.is_valid_item_type(data["item_type"]):
            raise BadRequestError(CatalogRules.invalid_item_type_message())

        existing = await session.execute(
            select(Review.id).where(
                Review.user_id == user_id,
                Review.item_id == data["item_id"],
                Review.item_type == data["item_type"],
            )
        )
        if existing.first() is not None:
            raise ConflictError("You have already reviewed this item")

        review = Review(
            user_id=user_id,
            item_id=data["item_id"],
            item_type=data["item_type"],
            rating=ReaderRules.clamp_rating(data["rating"]),
            comment=data.get("comment"),
            is_verified_purchase=data.get("is_verified_purchase", False),
            is_spoiler=data.get("is_spoiler", False),
            helpful_count=0,
        )
        session.add(review)
        await session.commit()
        logger.info(f"Review {review.id} by {user_id} on {review.item_type}:{review.item_id}")

        return review_dict(await self._load(session, review.id))

    async def _load(self, session: AsyncSession, review_id: int) -> Review:
        stmt = (
            select(Review)
            .where(Review.id == review_id)
            .options(selectinload(Review.user))
            .execution_options(populate_existing=True)
        )
        return (await session.execute(stmt)).scalar_one()

    async def _owned(self, session: AsyncSession, user_id: str, review_id: int) -> Review:
        review = await self._load(session, review_id)
        if review.user_id != user_id:
            raise ForbiddenError("You can only modify your own reviews")
        return review

    async def update_review(self, session: AsyncSession, user_id: str, review_id: int, changes: Dict[str, Any]) -> Dict:
        review = await self._owned(session, user_id, review_id)
        if changes.get("rating") is not None:
            review.rating = ReaderRules.clamp_rating(changes["rating"])
        for field in ("comment", "is_spoiler"):
            if field in changes:
                setattr(review, field, changes[field])
        review.updated_at = datetime.now(timezone.utc)
        await session.commit()
        return review_dict(await self._load(session, review_id))

    async def delete_review(self, session: AsyncSession, user_id: str, review_id: int) -> Dict:
        review = await self._owned(session, user_id, review_id)
        await session.delete(review)
        await session.commit()
        return {"message": "Review deleted successfully"}


review_service = ReviewService()
