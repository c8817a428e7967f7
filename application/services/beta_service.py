import logging
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.persistence.sqlite.unit_of_work import SqlAlchemyUnitOfWork
from app.core.config import settings
from app.core.errors import ForbiddenError
from app.models.beta import BetaApplication, BetaStatus

logger = logging.getLogger(__name__)


class BetaService:
    """
    Capacity gate for the beta program.

    The count and the insert share a transaction but take no lock, so
    concurrent submissions near the ceiling can overshoot it.
    """

    async def apply(self, session: AsyncSession, data: Dict[str, Any]) -> Dict:
        if not settings.BETA_ENABLED:
            raise ForbiddenError("Beta program is not active")

        async with SqlAlchemyUnitOfWork(session) as uow:
            repo = uow.repository(BetaApplication)
            if await repo.count() >= settings.BETA_MAX_APPLICATIONS:
                raise ForbiddenError("Beta application limit reached")

            status = BetaStatus.APPROVED if settings.BETA_AUTO_APPROVE else BetaStatus.PENDING
            application = await repo.add(BetaApplication(**data, status=status.value))

        logger.info(f"Beta application {application.id} submitted ({application.status})")
        return {"message": "Application submitted successfully"}

    async def status(self, session: AsyncSession) -> Dict:
        maximum = settings.BETA_MAX_APPLICATIONS
        try:
            count = await SqlAlchemyUnitOfWork(session).repository(BetaApplication).count()
        except SQLAlchemyError as e:
            logger.error(f"Error checking beta status: {e}", exc_info=True)
            return {"closed": True, "remaining": 0}
        return {"closed": count >= maximum, "remaining": max(0, maximum - count)}


beta_service = BetaService()
