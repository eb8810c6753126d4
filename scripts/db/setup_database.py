"""
Local Database Setup Script

Creates the contract/analysis/usage tables in a local PostgreSQL database
and prints row counts, so the analytics endpoints have something to read.
"""

import asyncio
import sys

from sqlalchemy import func, select

from contract_analytics.core.db import (
    AnalysisResult,
    Contract,
    UsageLog,
    UserActivity,
    check_database_connection,
    close_engine,
    get_session,
    initialize_database,
)
from contract_analytics.core.logging import setup_logger

logger = setup_logger("INFO")

TABLES = {
    "contracts": Contract,
    "analysis_results": AnalysisResult,
    "usage_logs": UsageLog,
    "user_activities": UserActivity,
}


async def table_counts() -> dict:
    counts = {}
    async with get_session() as session:
        for name, model in TABLES.items():
            result = await session.execute(select(func.count()).select_from(model))
            counts[name] = result.scalar_one()
    return counts


async def main():
    """Main setup function."""
    print("=" * 70)
    print("Contract Analytics Database Setup")
    print("=" * 70)
    print()

    try:
        print("Step 1: Initializing database and creating tables...")
        await initialize_database(create_schema=True)
        print("✅ Database initialized")
        print()

        print("Step 2: Verifying database connection...")
        is_available, error = await check_database_connection()

        if not is_available:
            print(f"❌ Database connection failed: {error}")
            print()
            print("Troubleshooting:")
            print("1. Make sure PostgreSQL is installed and running")
            print("2. Check DATABASE_URL or the DB_* variables in your .env file")
            print("3. Ensure the database exists:")
            print("   CREATE DATABASE contract_analytics;")
            return 1

        print("✅ Database connection verified")
        print()

        print("Table Counts:")
        for table, count in (await table_counts()).items():
            print(f"  {table}: {count}")

        print()
        print("=" * 70)
        print("✅ Database setup complete!")
        print("=" * 70)
        print()
        print("Start the application: uvicorn contract_analytics.main:app --reload")
        print()

        return 0

    except Exception as e:
        print(f"❌ Setup failed: {str(e)}")
        return 1

    finally:
        await close_engine()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
