from typing import AsyncIterator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


def _is_sqlite(uri: str) -> bool:
    return "sqlite" in uri


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores ON DELETE CASCADE unless the pragma is set per connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(uri: str) -> AsyncEngine:
    engine_args = {"echo": False, "pool_pre_ping": True}
    if not _is_sqlite(uri):
        engine_args.update({"pool_size": 3, "max_overflow": 2, "pool_recycle": 300})

    engine = create_async_engine(uri, **engine_args)
    if _is_sqlite(uri):
        enable_sqlite_foreign_keys(engine)
    return engine


# Admin tier: service credentials, row-level security bypassed
engine = build_engine(str(settings.SQLALCHEMY_DATABASE_URI))
AsyncSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# User tier: row-level security applies to the caller
if settings.user_database_uri == str(settings.SQLALCHEMY_DATABASE_URI):
    user_engine = engine
else:
    user_engine = build_engine(settings.user_database_uri)
UserSessionLocal = sessionmaker(user_engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session


def scope_session_to_user(session: AsyncSession, user_id: str) -> None:
    """Publish the caller id to Postgres row-level policies on every transaction of the session."""
    if session.bind.dialect.name != "postgresql":
        return

    @event.listens_for(session.sync_session, "after_begin")
    def _publish_claims(sync_session, transaction, connection):
        connection.execute(text("select set_config('request.jwt.claim.sub', :sub, true)"), {"sub": user_id})
