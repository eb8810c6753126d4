"""
Shared fixtures: a throwaway SQLite database per test and a repository
bound to it.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from contract_analytics.core.db import AnalyticsRepository, Base, session_scope


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    # File-backed so every pooled connection sees the same tables
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'analytics.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def repository(session_factory):
    return AnalyticsRepository(session_scope=session_scope(session_factory))


@pytest.fixture
def seed(session_factory):
    """Insert model instances and commit."""
    async def _seed(*rows):
        async with session_factory() as session:
            session.add_all(rows)
            await session.commit()

    return _seed
