import os

# Set test environment variables BEFORE any app imports
os.environ["SQLALCHEMY_DATABASE_URI"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("AUTH_URL", "http://identity.test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_user_db
from app.core.container import container
from app.core.database import enable_sqlite_foreign_keys, get_db
from app.main import app
from app.models import Base, User

ADMIN_TOKEN = "admin-token"
READER_TOKEN = "reader-token"
OTHER_READER_TOKEN = "other-reader-token"

ACCOUNTS = {
    ADMIN_TOKEN: {"id": "admin-1", "email": "admin@example.com"},
    READER_TOKEN: {"id": "reader-1", "email": "reader@example.com"},
    OTHER_READER_TOKEN: {"id": "reader-2", "email": "other@example.com"},
}


class FakeIdentityClient:
    """Stands in for the identity provider: known tokens map to accounts."""

    def __init__(self, accounts):
        self.accounts = accounts
        self.calls = []

    async def get_user(self, token):
        self.calls.append(token)
        return self.accounts.get(token)


@pytest_asyncio.fixture
async def engine():
    # One shared in-memory database for every session of a test
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def identity():
    return FakeIdentityClient(ACCOUNTS)


@pytest_asyncio.fixture
async def client(session_factory, identity):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async with session_factory() as session:
        session.add(User(id="admin-1", email="admin@example.com", role="admin"))
        await session.commit()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_user_db] = override_get_db
    container.identity_client = identity

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    container.identity_client = None


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def reader_headers():
    return {"Authorization": f"Bearer {READER_TOKEN}"}


@pytest.fixture
def other_reader_headers():
    return {"Authorization": f"Bearer {OTHER_READER_TOKEN}"}


@pytest.fixture
def create(client, admin_headers):
    """POSTs as admin and returns the created row, failing loudly on anything but 201."""

    async def _create(path, body):
        response = await client.post(path, json=body, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest_asyncio.fixture
async def catalog(create):
    """One published book with a single branch down to two issues."""
    book = await create("/api/books", {"title": "The Long Road", "status": "published", "price": 40})
    volume = await create("/api/admin/volumes", {"book_id": book["id"], "title": "Volume One", "order_index": 1})
    saga = await create("/api/admin/sagas", {"volume_id": volume["id"], "title": "First Saga", "order_index": 1})
    arc = await create("/api/admin/arcs", {"saga_id": saga["id"], "title": "Opening Arc", "order_index": 1})
    first = await create("/api/admin/issues", {"arc_id": arc["id"], "title": "Issue One", "order_index": 1})
    second = await create("/api/admin/issues", {"arc_id": arc["id"], "title": "Issue Two", "order_index": 2})
    return {"book": book, "volume": volume, "saga": saga, "arc": arc, "issues": [first, second]}
