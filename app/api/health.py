import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.errors import database_message

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness plus a round trip to the admin-tier database."""
    backend = db.bind.dialect.name
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        message = database_message(e)
        logger.error(f"Health check failed on {backend}: {message}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "error", "db": "disconnected", "backend": backend, "error": message},
        )
    return {"status": "ok", "db": "connected", "backend": backend, "version": settings.VERSION}
