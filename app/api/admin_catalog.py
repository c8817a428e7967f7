import logging
from typing import Type

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import admin_rate_limited, get_db
from app.core.auth import AuthUser
from app.core.errors import handle_errors
from app.schemas.catalog import (
    ArcCreate,
    ArcUpdate,
    BookCreate,
    BookUpdate,
    IssueCreate,
    IssueUpdate,
    SagaCreate,
    SagaUpdate,
    VolumeCreate,
    VolumeUpdate,
)
from application.services.catalog_service import (
    CatalogLevelService,
    arc_service,
    book_service,
    issue_service,
    saga_service,
    volume_service,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/books")
async def list_books(admin: AuthUser = Depends(admin_rate_limited), db: AsyncSession = Depends(get_db)):
    with handle_errors():
        return await book_service.list_admin(db)


@router.post("/books", status_code=status.HTTP_201_CREATED)
async def create_book(body: BookCreate, admin: AuthUser = Depends(admin_rate_limited), db: AsyncSession = Depends(get_db)):
    with handle_errors():
        return await book_service.create_book(db, body.model_dump())


@router.put("/books/{book_id}")
async def update_book(
    book_id: int,
    body: BookUpdate,
    admin: AuthUser = Depends(admin_rate_limited),
    db: AsyncSession = Depends(get_db),
):
    with handle_errors(not_found="Book not found"):
        return await book_service.update_book(db, book_id, body.model_dump(exclude_unset=True))


@router.delete("/books/{book_id}")
async def delete_book(book_id: int, admin: AuthUser = Depends(admin_rate_limited), db: AsyncSession = Depends(get_db)):
    with handle_errors(not_found="Book not found"):
        return await book_service.delete_book(db, book_id)


def register_level(path: str, service: CatalogLevelService, create_schema: Type[BaseModel], update_schema: Type[BaseModel]):
    """Adds list/create/get/update/delete routes for one catalog level below Book."""

    @router.get(f"/{path}", name=f"list_{path}")
    async def list_nodes(admin: AuthUser = Depends(admin_rate_limited), db: AsyncSession = Depends(get_db)):
        with handle_errors():
            return await service.list_all(db)

    @router.post(f"/{path}", status_code=status.HTTP_201_CREATED, name=f"create_{path}")
    async def create_node(
        body: create_schema,
        admin: AuthUser = Depends(admin_rate_limited),
        db: AsyncSession = Depends(get_db),
    ):
        with handle_errors():
            return await service.create(db, body.model_dump())

    @router.get(f"/{path}/{{node_id}}", name=f"get_{path}")
    async def get_node(node_id: int, admin: AuthUser = Depends(admin_rate_limited), db: AsyncSession = Depends(get_db)):
        with handle_errors(not_found=service.not_found):
            return await service.get(db, node_id)

    @router.put(f"/{path}/{{node_id}}", name=f"update_{path}")
    async def update_node(
        node_id: int,
        body: update_schema,
        admin: AuthUser = Depends(admin_rate_limited),
        db: AsyncSession = Depends(get_db),
    ):
        with handle_errors(not_found=service.not_found):
            return await service.update(db, node_id, body.model_dump(exclude_unset=True))

    @router.delete(f"/{path}/{{node_id}}", name=f"delete_{path}")
    async def delete_node(
        node_id: int, admin: AuthUser = Depends(admin_rate_limited), db: AsyncSession = Depends(get_db)
    ):
        with handle_errors(not_found=service.not_found):
            return await service.delete(db, node_id)


register_level("volumes", volume_service, VolumeCreate, VolumeUpdate)
register_level("sagas", saga_service, SagaCreate, SagaUpdate)
register_level("arcs", arc_service, ArcCreate, ArcUpdate)
register_level("issues", issue_service, IssueCreate, IssueUpdate)
