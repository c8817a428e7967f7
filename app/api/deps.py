import logging
from typing import AsyncIterator, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthUser, bearer_token
from app.core.container import container
from app.core.context import set_current_user_id
from app.core.database import UserSessionLocal, get_db, scope_session_to_user
from app.core.rate_limit import RateLimitBucket, apply_rate_limit
from application.services.user_service import user_service

logger = logging.getLogger(__name__)

__all__ = ["get_db", "get_user_db", "require_auth", "require_admin", "admin_rate_limited"]


async def require_auth(
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> AuthUser:
    token = bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    account = await container.identity_client.get_user(token)
    if not account or not account.get("id"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    profile = await user_service.get_or_create_user(db, account["id"], account.get("email"))
    set_current_user_id(profile.id)
    return AuthUser(id=profile.id, email=profile.email or account.get("email"), role=profile.role)


async def require_admin(user: AuthUser = Depends(require_auth)) -> AuthUser:
    if not user.is_admin:
        logger.info(f"Admin route refused for {user.id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return user


async def get_user_db(user: AuthUser = Depends(require_auth)) -> AsyncIterator[AsyncSession]:
    """Session on the user-scoped tier, row-level policies applied for the caller."""
    async with UserSessionLocal() as session:
        scope_session_to_user(session, user.id)
        yield session


async def admin_rate_limited(admin: AuthUser = Depends(require_admin)) -> AuthUser:
    if not await apply_rate_limit(RateLimitBucket.ADMIN, admin.id):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Too many requests")
    return admin
