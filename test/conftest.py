"""
Pytest configuration and fixtures for newsdesk tests
"""

import os
import sys
from collections.abc import AsyncGenerator
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Settings are read at import time; give them a throwaway database and key
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["SWEEP_INTERVAL_SECONDS"] = "0"

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

from newsdesk.database import Base, get_db  # noqa: E402
from newsdesk.models.user import Role, User  # noqa: E402
from newsdesk.services.asset_service import AssetStore, get_asset_store  # noqa: E402
from newsdesk.services.notification_service import get_notification_dispatcher  # noqa: E402
from utils.mock_utils import (  # noqa: E402
    ADMIN_ROLE_ID,
    COLUMNIST_ROLE_ID,
    EDITOR_ROLE_ID,
    READER_ROLE_ID,
    SUPERUSER_ROLE_ID,
    TEST_ROLES,
    create_test_user,
)
from utils.mocks import RecordingDispatcher  # noqa: E402

# One in-memory SQLite database shared by every session in a test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)

# Now import and patch the app's database components
import newsdesk.database as database_module  # noqa: E402
from main import app  # noqa: E402

database_module.engine = test_engine
database_module.AsyncSessionLocal = TestSessionLocal


@pytest.fixture(scope="function")
async def setup_test_database():
    """Create the schema and the test roles for one test, then drop everything."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        for role_data in TEST_ROLES:
            session.add(
                Role(
                    id=role_data["id"],
                    name=role_data["name"],
                    permissions=[int(p) for p in role_data["permissions"]],
                )
            )
        await session.commit()

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(scope="function")
async def test_db(setup_test_database) -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionLocal() as session:
        yield session


@pytest.fixture
async def columnist(test_db: AsyncSession) -> User:
    return await create_test_user(test_db, "columnist", COLUMNIST_ROLE_ID)


@pytest.fixture
async def other_columnist(test_db: AsyncSession) -> User:
    return await create_test_user(test_db, "othercolumnist", COLUMNIST_ROLE_ID)


@pytest.fixture
async def editor(test_db: AsyncSession) -> User:
    return await create_test_user(test_db, "editor", EDITOR_ROLE_ID)


@pytest.fixture
async def reader(test_db: AsyncSession) -> User:
    return await create_test_user(test_db, "reader", READER_ROLE_ID)


@pytest.fixture
async def admin(test_db: AsyncSession) -> User:
    return await create_test_user(test_db, "admin", ADMIN_ROLE_ID)


@pytest.fixture
async def superuser(test_db: AsyncSession) -> User:
    return await create_test_user(test_db, "superuser", SUPERUSER_ROLE_ID)


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    recorder = RecordingDispatcher()
    yield recorder
    recorder.clear()


@pytest.fixture
def assets() -> MagicMock:
    store = MagicMock(spec=AssetStore)
    store.delete.return_value = True
    return store


@pytest.fixture
async def client(setup_test_database, dispatcher, assets) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, wired to the test database and recording mocks."""

    async def override_get_db():
        async with TestSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_asset_store] = lambda: assets

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
