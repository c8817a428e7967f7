import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


class UserService:
    async def get_user(self, session: AsyncSession, user_id: str) -> Optional[User]:
        result = await session.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    async def get_or_create_user(self, session: AsyncSession, user_id: str, email: Optional[str] = None) -> User:
        """Profile rows carry the role; accounts without one start as plain users."""
        user = await self.get_user(session, user_id)
        if not user:
            user = User(id=user_id, email=email, role=UserRole.USER.value)
            session.add(user)
            await session.commit()
            await session.refresh(user)
            logger.info(f"Created profile for {user_id}")
        return user


user_service = UserService()
