"""
Alembic Database Migration Configuration

The contracts, analysis_results, usage_logs and user_activities tables are
owned by the web application. Migrations here only track the columns and
indexes this service reads, so local databases match production.

Usage:
1. Generate migration: alembic revision --autogenerate -m "description"
2. Apply migration: alembic upgrade head
3. Rollback: alembic downgrade -1

Runs through the async engine (asyncpg), same URL resolution as the app.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

# Import models for autogenerate support
from contract_analytics.core.db import Base, Contract, AnalysisResult, UsageLog, UserActivity  # noqa: F401
from contract_analytics.core.db import get_database_url

# Alembic Config object
config = context.config

# Interpret the config file for Python logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Set target metadata for autogenerate
target_metadata = Base.metadata

DATABASE_URL = get_database_url()


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.

    Emits SQL to stdout using just the URL; no DBAPI connection is opened.
    """
    context.configure(
        url=DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """
    Run migrations in 'online' mode.

    Opens an async connection and runs the migration steps inside run_sync.
    """
    connectable = create_async_engine(DATABASE_URL, poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
