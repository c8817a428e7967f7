import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.persistence.sqlite.base_repository import SqlAlchemyRepository
from app.core.errors import BadRequestError, ConflictError, NotFoundError
from app.models.post import Post
from domain.rules.catalog_rules import CatalogRules
from domain.rules.slug_rules import SlugRules

logger = logging.getLogger(__name__)


class PostService:
    async def _slug_taken(self, session: AsyncSession, slug: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Post.id).where(Post.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Post.id != exclude_id)
        return (await session.execute(stmt)).first() is not None

    async def _unique_slug(self, session: AsyncSession, raw: str, exclude_id: Optional[int] = None) -> str:
        slug = SlugRules.slugify(raw)
        if not slug:
            raise BadRequestError("Slug cannot be empty")
        if await self._slug_taken(session, slug, exclude_id):
            raise ConflictError("A post with this slug already exists")
        return slug

    async def list_published(
        self,
        session: AsyncSession,
        category: Optional[str] = None,
        tag: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        stmt = select(Post).where(Post.status == "published").order_by(Post.created_at.desc(), Post.id.desc())
        if category:
            stmt = stmt.where(Post.category == category)
        posts = [post.to_dict() for post in (await session.execute(stmt)).scalars().all()]
        # Tags are a JSON list, matched here so the filter behaves the same on every backend.
        if tag:
            posts = [post for post in posts if tag in (post.get("tags") or [])]

        start = (max(page, 1) - 1) * limit
        return {"posts": posts[start : start + limit], "total": len(posts)}

    async def get_published(self, session: AsyncSession, slug: str) -> Dict:
        stmt = select(Post).where(Post.slug == slug, Post.status == "published")
        post = (await session.execute(stmt)).scalars().first()
        if post is None:
            raise NotFoundError("Post not found")
        return post.to_dict()

    async def list_all(self, session: AsyncSession) -> List[Dict]:
        posts = await SqlAlchemyRepository(session, Post).list(
            limit=10000, order_by=(Post.created_at.desc(), Post.id.desc())
        )
        return [post.to_dict() for post in posts]

    async def create_post(self, session: AsyncSession, data: Dict[str, Any], author_id: Optional[str] = None) -> Dict:
        data = {k: v for k, v in data.items() if v is not None}
        data["slug"] = await self._unique_slug(session, data.get("slug") or data["title"])
        post = Post(author_id=author_id, **data)
        await SqlAlchemyRepository(session, Post).add(post)
        await session.commit()
        logger.info(f"Created post {post.id} ({post.slug})")
        return post.to_dict()

    async def update_post(self, session: AsyncSession, post_id: int, payload: Dict[str, Any]) -> Dict:
        repo = SqlAlchemyRepository(session, Post)
        await repo.get_one(post_id)
        if payload.get("slug"):
            payload["slug"] = await self._unique_slug(session, payload["slug"], exclude_id=post_id)
        elif "slug" in payload:
            payload.pop("slug")

        post = await repo.update(post_id, CatalogRules.prepare_update(payload))
        await session.commit()
        return post.to_dict()

    async def delete_post(self, session: AsyncSession, post_id: int) -> Dict:
        repo = SqlAlchemyRepository(session, Post)
        await repo.get_one(post_id)
        await repo.delete(post_id)
        await session.commit()
        return {"message": "Post deleted successfully"}


post_service = PostService()
