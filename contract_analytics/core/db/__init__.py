"""
Database module initialization.
"""

from .postgres import (
    Base,
    SessionScope,
    init_engine,
    create_tables,
    session_scope,
    get_session,
    check_database_connection,
    close_engine,
    initialize_database,
    get_database_url
)

from .models import (
    AnalysisStatus,
    Contract,
    AnalysisResult,
    UsageLog,
    UserActivity,
)

from .repository import (
    AnalyticsScope,
    AnalyticsRepository,
)

__all__ = [
    "Base",
    "SessionScope",
    "init_engine",
    "create_tables",
    "session_scope",
    "get_session",
    "check_database_connection",
    "close_engine",
    "initialize_database",
    "get_database_url",
    "AnalysisStatus",
    "Contract",
    "AnalysisResult",
    "UsageLog",
    "UserActivity",
    "AnalyticsScope",
    "AnalyticsRepository",
]
