from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.core.errors import handle_errors
from app.schemas.content import BetaApplicationCreate
from application.services.beta_service import beta_service

router = APIRouter()


@router.post("/apply")
async def apply(body: BetaApplicationCreate, db: AsyncSession = Depends(get_db)):
    with handle_errors():
        return await beta_service.apply(db, body.model_dump())


@router.get("/status")
async def beta_status(db: AsyncSession = Depends(get_db)):
    return await beta_service.status(db)
