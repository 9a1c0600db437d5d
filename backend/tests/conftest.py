"""Root conftest: shared test configuration, async DB and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - db_manager patched so the readiness probe sees the test engine
    - Foreign keys are enforced, so cascade order is checked against the schema

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for store and
      route tests; StaticPool keeps one connection so every session sees the
      same database
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import statusboard.infrastructure.database as db_module  # noqa: E402
import statusboard.models  # noqa: E402,F401
from statusboard.db.base import Base  # noqa: E402
from statusboard.infrastructure.database import (  # noqa: E402
    DatabaseSessionManager, enforce_sqlite_foreign_keys, get_db,
)
from statusboard.main import app  # noqa: E402
from statusboard.stores import build_sql_stores  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    enforce_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def sql_stores(test_db):
    return build_sql_stores(test_db)


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def sign_up(client):
    """Factory: create a user through the API; returns the session body plus headers."""
    async def _sign_up(name: str) -> dict:
        res = await client.post("/api/v1/users", json={
            "first_name": name.title(), "last_name": "Tester",
            "email": f"{name}@example.com", "password": "correct-horse",
        })
        assert res.status_code == 201, res.text
        body = res.json()
        body["headers"] = {"Authorization": f"Bearer {body['token']}"}
        return body
    return _sign_up
