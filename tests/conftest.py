"""
Pytest fixtures для тестов.

Предоставляет:
- test_db: изолированная SQLite in-memory БД для каждого теста
- alice / bob / admin: пользователи с известными API ключами
- test_client: HTTP клиент для тестирования API endpoints
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskflow.api.dependencies import get_db
from taskflow.core.database import create_engine_for
from taskflow.main import app
from taskflow.models import Base, User

# Test database URL (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ALICE_KEY = "alice-test-key"
BOB_KEY = "bob-test-key"
ADMIN_KEY = "admin-test-key"


@pytest_asyncio.fixture
async def test_engine():
    """
    Async engine для тестовой БД (SQLite in-memory).

    create_engine_for() включает StaticPool (одно соединение для in-memory БД)
    и PRAGMA foreign_keys=ON (нужно для ON DELETE CASCADE).
    """
    engine = create_engine_for(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db(session_factory):
    """
    Async session для работы с тестовой БД.

    Каждый тест получает чистую БД.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


async def _make_user(db: AsyncSession, name: str, api_key: str, is_admin: bool = False) -> User:
    user = User(
        name=name,
        email=f"{name.lower()}@example.com",
        is_admin=is_admin,
        api_key=api_key,
    )
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def alice(test_db) -> User:
    return await _make_user(test_db, "Alice", ALICE_KEY)


@pytest_asyncio.fixture
async def bob(test_db) -> User:
    return await _make_user(test_db, "Bob", BOB_KEY)


@pytest_asyncio.fixture
async def admin(test_db) -> User:
    return await _make_user(test_db, "Admin", ADMIN_KEY, is_admin=True)


@pytest.fixture
def alice_headers(alice) -> dict[str, str]:
    return {"X-API-Key": ALICE_KEY}


@pytest.fixture
def bob_headers(bob) -> dict[str, str]:
    return {"X-API-Key": BOB_KEY}


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return {"X-API-Key": ADMIN_KEY}


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTP клиент для тестирования API endpoints.

    Использует тестовую БД вместо production БД.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def anyio_backend():
    """Используем asyncio для всех async тестов."""
    return "asyncio"
