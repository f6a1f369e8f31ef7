"""Test configuration and fixtures for entityql."""

from dotenv import load_dotenv
import pytest
import os
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from tests.models import Base

# Try to load environment variables from .env file
load_dotenv()


@pytest.fixture(scope="function")
async def engine():
    """Create a test database engine for each test function."""
    test_db_url = os.getenv('ENTITYQL_TEST_DATABASE_URL')
    if test_db_url:
        engine = create_async_engine(test_db_url, echo=False, future=True)
        # Clean slate; also validates the connection/driver early
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        is_external_db = True
    else:
        engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False, future=True)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        is_external_db = False

    yield engine

    if is_external_db:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new database session for each test function."""
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture(autouse=True)
def _clean_entityql_env(monkeypatch):
    """Keep ENTITYQL_* settings from a developer .env out of unit tests."""
    for name in ('ENTITYQL_UNMAPPED_TYPES', 'ENTITYQL_AUTO_CAMEL_CASE'):
        monkeypatch.delenv(name, raising=False)


# Import fixtures from fixtures module
from tests.fixtures import populated_db  # noqa: E402,F401
