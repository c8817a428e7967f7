from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from app.core.config import settings
from app.core.logging_middleware import LoggingMiddleware

# Setup logging
from app.core.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

from app.core.context import get_request_id
from app.core.database import engine
from app.models import Base

from app.api import (
    admin_catalog,
    beta,
    books,
    character_tags,
    characters,
    easter_eggs,
    health,
    posts,
    reader,
    shop_items,
    timeline,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    if settings.AUTO_MIGRATE:
        logger.info("AUTO_MIGRATE enabled; creating missing tables.")
        if "sqlite" in str(settings.SQLALCHEMY_DATABASE_URI):
            # The default SQLite file lives under ./data
            os.makedirs("./data", exist_ok=True)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    yield

    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        problems.append(f"{field}: {error.get('msg')}" if field else error.get("msg"))
    return JSONResponse(status_code=400, content={"error": "Validation error: " + ", ".join(problems)})


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = get_request_id()
    logger.error(f"Global Exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "request_id": req_id},
    )


app.include_router(health.router, tags=["health"])
# Reader routes share the /api/books prefix and must match before /api/books/{book_id}
app.include_router(reader.router, prefix="/api/books", tags=["reader"])
app.include_router(books.router, prefix="/api/books", tags=["books"])
app.include_router(admin_catalog.router, prefix="/api/admin", tags=["admin"])
app.include_router(posts.router, prefix="/api", tags=["posts"])
app.include_router(shop_items.router, prefix="/api", tags=["shop"])
app.include_router(characters.router, prefix="/api/characters", tags=["characters"])
app.include_router(character_tags.router, prefix="/api/character-tags", tags=["characters"])
app.include_router(easter_eggs.router, prefix="/api/easter_eggs", tags=["easter_eggs"])
app.include_router(beta.router, prefix="/api/beta", tags=["beta"])
app.include_router(timeline.router, prefix="/api/timeline", tags=["timeline"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
