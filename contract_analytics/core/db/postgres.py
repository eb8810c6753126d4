"""
PostgreSQL Database Configuration

Async PostgreSQL connection using SQLAlchemy + asyncpg.

Environment Variables:
- DATABASE_URL: Full async connection URL (overrides the variables below)
- DB_HOST: Database host (default: localhost)
- DB_PORT: Database port (default: 5432)
- DB_USER: Database user (default: postgres)
- DB_PASS: Database password (default: postgres)
- DB_NAME: Database name (default: contract_analytics)

The contract, analysis and usage tables are owned by the web application.
This service only reads them; create_tables() exists for local development.
"""

import os
from typing import AsyncContextManager, AsyncGenerator, Callable, Optional
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
from contextlib import asynccontextmanager

from contract_analytics.core.config import settings
from contract_analytics.core.logging import setup_logger

logger = setup_logger("INFO")

# SQLAlchemy Base for models
Base = declarative_base()

# Global engine and session factory
_engine = None
_async_session_factory = None

SessionScope = Callable[[], AsyncContextManager[AsyncSession]]


def get_database_url() -> str:
    """
    Build the async connection URL.

    Returns:
        settings.DATABASE_URL when set, otherwise a postgresql+asyncpg URL
        assembled from the DB_* variables.
    """
    if settings.DATABASE_URL:
        return settings.DATABASE_URL

    db_host = os.getenv("DB_HOST", "localhost")
    db_port = os.getenv("DB_PORT", "5432")
    db_user = os.getenv("DB_USER", "postgres")
    db_pass = os.getenv("DB_PASS", "postgres")
    db_name = os.getenv("DB_NAME", "contract_analytics")

    url = f"postgresql+asyncpg://{db_user}:{db_pass}@{db_host}:{db_port}/{db_name}"

    # Log connection attempt (without password)
    safe_url = f"postgresql+asyncpg://{db_user}:***@{db_host}:{db_port}/{db_name}"
    logger.info(f"Database URL: {safe_url}")

    return url


def init_engine(database_url: Optional[str] = None):
    """
    Initialize async SQLAlchemy engine with connection pooling.

    Only called once at startup.
    """
    global _engine, _async_session_factory

    if _engine is not None:
        logger.info("Database engine already initialized")
        return

    try:
        database_url = database_url or get_database_url()

        engine_kwargs = {"echo": False, "pool_pre_ping": True}
        if database_url.startswith("postgresql"):
            engine_kwargs.update(
                pool_size=10,
                max_overflow=20,
                pool_recycle=3600,  # Recycle connections after 1 hour
            )

        _engine = create_async_engine(database_url, **engine_kwargs)

        _async_session_factory = async_sessionmaker(
            _engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        logger.info("✅ Database engine initialized successfully")

    except Exception as e:
        logger.error(f"❌ Failed to initialize database engine: {str(e)}")
        _engine = None
        _async_session_factory = None
        raise


async def create_tables():
    """
    Create all tables defined in Base metadata.

    Only for DEV mode. Does not drop existing tables.
    """
    if _engine is None:
        raise RuntimeError("Database engine not initialized. Call init_engine() first.")

    try:
        async with _engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("✅ Database tables created/verified")

    except Exception as e:
        logger.error(f"❌ Failed to create tables: {str(e)}")
        raise


def session_scope(factory: async_sessionmaker) -> SessionScope:
    """
    Wrap a session factory into a context-manager factory.

    Each call opens a fresh session that is rolled back on error and
    always closed, so concurrent callers never share a session.
    """
    @asynccontextmanager
    async def _scope() -> AsyncGenerator[AsyncSession, None]:
        session = factory()
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"Session error, rolled back: {str(e)}")
            raise
        finally:
            await session.close()

    return _scope


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get async database session from the global engine.

    Usage:
        async with get_session() as session:
            result = await session.execute(...)

    Raises:
        RuntimeError: If engine not initialized
    """
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_engine() first.")

    async with session_scope(_async_session_factory)() as session:
        yield session


async def check_database_connection() -> tuple[bool, Optional[str]]:
    """
    Check if database is available and responsive.

    Returns:
        Tuple of (is_available, error_message)
    """
    try:
        if _engine is None:
            return False, "Database engine not initialized"

        async with _engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            row = result.scalar()

            if row == 1:
                logger.debug("Database connection check: OK")
                return True, None
            else:
                return False, "Unexpected query result"

    except Exception as e:
        error_msg = f"Database connection failed: {str(e)}"
        logger.error(error_msg)
        return False, error_msg


async def close_engine():
    """
    Close database engine and cleanup connections.

    Should be called on application shutdown.
    """
    global _engine, _async_session_factory

    if _engine is None:
        logger.info("Database engine not initialized, nothing to close")
        return

    try:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        logger.info("✅ Database engine closed successfully")

    except Exception as e:
        logger.error(f"❌ Error closing database engine: {str(e)}")


async def initialize_database(create_schema: bool = False):
    """
    Complete database initialization sequence.

    1. Initialize engine
    2. Create tables (development only)
    3. Verify connection

    Raises exception if database unavailable.
    """
    logger.info("Initializing database...")

    init_engine()

    if create_schema:
        await create_tables()

    is_available, error = await check_database_connection()

    if not is_available:
        raise RuntimeError(f"Database connection failed: {error}")

    logger.info("✅ Database initialization complete")
