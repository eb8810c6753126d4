"""
Analytics Repository — Scoped read queries for trends and reports

Every query is filtered by owner id, optional organization id and a
half-open created_at window [start, end).

Each method opens its own session from the injected session scope, so
callers may run any number of queries concurrently with asyncio.gather.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import select, func

from contract_analytics.core.db.models import AnalysisResult, Contract, UsageLog, UserActivity
from contract_analytics.core.db.postgres import SessionScope, get_session
from contract_analytics.core.logging import setup_logger

logger = setup_logger("INFO")

AGGREGATE_FUNCTIONS = {
    "sum": func.sum,
    "avg": func.avg,
    "min": func.min,
    "max": func.max,
}

ANALYSIS_NUMERIC_COLUMNS = {
    "processing_time": AnalysisResult.processing_time,
    "tokens_used": AnalysisResult.tokens_used,
    "estimated_cost": AnalysisResult.estimated_cost,
    "confidence_score": AnalysisResult.confidence_score,
    "high_risk_count": AnalysisResult.high_risk_count,
    "critical_risk_count": AnalysisResult.critical_risk_count,
}


@dataclass(frozen=True)
class AnalyticsScope:
    """Owner of the rows being aggregated."""
    user_id: str
    organization_id: Optional[str] = None


def _scoped(model, scope: AnalyticsScope, start: datetime, end: datetime) -> list:
    """Build the standard owner + window filter list for a model."""
    conditions = [
        model.user_id == scope.user_id,
        model.created_at >= start,
        model.created_at < end,
    ]
    if scope.organization_id:
        conditions.append(model.organization_id == scope.organization_id)
    return conditions


def _to_number(value: Any) -> Optional[float]:
    """Normalize Decimal/int aggregate results; None stays None."""
    if value is None:
        return None
    return float(value)


class AnalyticsRepository:
    """Read-only queries over contracts, analyses and usage events."""

    def __init__(self, session_scope: SessionScope = get_session):
        self._session_scope = session_scope

    async def _scalar(self, query) -> Any:
        async with self._session_scope() as session:
            result = await session.execute(query)
            return result.scalar()

    async def count_contracts(self, scope: AnalyticsScope, start: datetime, end: datetime) -> int:
        """Count live (not soft-deleted) contracts created in the window."""
        query = (
            select(func.count())
            .select_from(Contract)
            .where(*_scoped(Contract, scope, start, end), Contract.deleted_at.is_(None))
        )
        return int(await self._scalar(query) or 0)

    async def count_analyses(self, scope: AnalyticsScope, start: datetime, end: datetime) -> int:
        """Count analysis runs created in the window."""
        query = (
            select(func.count())
            .select_from(AnalysisResult)
            .where(*_scoped(AnalysisResult, scope, start, end))
        )
        return int(await self._scalar(query) or 0)

    async def count_activities(
        self,
        scope: AnalyticsScope,
        activity_type: str,
        start: datetime,
        end: datetime
    ) -> int:
        """Count user activity events of one type in the window."""
        query = (
            select(func.count())
            .select_from(UserActivity)
            .where(*_scoped(UserActivity, scope, start, end), UserActivity.activity_type == activity_type)
        )
        return int(await self._scalar(query) or 0)

    async def aggregate_analyses(
        self,
        scope: AnalyticsScope,
        function: str,
        column: str,
        start: datetime,
        end: datetime
    ) -> Optional[float]:
        """
        Apply sum/avg/min/max to a numeric analysis column.

        Rows where the column is NULL are excluded.

        Returns:
            The aggregate as float, or None when no rows matched
        """
        if function not in AGGREGATE_FUNCTIONS:
            raise ValueError(f"Unsupported aggregate function: {function}")
        if column not in ANALYSIS_NUMERIC_COLUMNS:
            raise ValueError(f"Unsupported aggregate column: {column}")

        target = ANALYSIS_NUMERIC_COLUMNS[column]
        query = (
            select(AGGREGATE_FUNCTIONS[function](target))
            .where(*_scoped(AnalysisResult, scope, start, end), target.is_not(None))
        )
        return _to_number(await self._scalar(query))

    async def performance_aggregate(
        self,
        scope: AnalyticsScope,
        start: datetime,
        end: datetime
    ) -> Dict[str, Optional[float]]:
        """Avg/min/max processing time and avg confidence for timed analyses."""
        query = (
            select(
                func.avg(AnalysisResult.processing_time),
                func.avg(AnalysisResult.confidence_score),
                func.min(AnalysisResult.processing_time),
                func.max(AnalysisResult.processing_time),
            )
            .where(*_scoped(AnalysisResult, scope, start, end), AnalysisResult.processing_time.is_not(None))
        )
        async with self._session_scope() as session:
            result = await session.execute(query)
            avg_time, avg_confidence, min_time, max_time = result.one()

        return {
            "avg_processing_time": _to_number(avg_time),
            "avg_confidence_score": _to_number(avg_confidence),
            "min_processing_time": _to_number(min_time),
            "max_processing_time": _to_number(max_time),
        }

    async def analysis_status_counts(
        self,
        scope: AnalyticsScope,
        start: datetime,
        end: datetime
    ) -> Dict[str, int]:
        """Group analyses in the window by status."""
        query = (
            select(AnalysisResult.status, func.count(AnalysisResult.id))
            .where(*_scoped(AnalysisResult, scope, start, end))
            .group_by(AnalysisResult.status)
        )
        async with self._session_scope() as session:
            result = await session.execute(query)
            return {status: int(count) for status, count in result.all()}

    async def usage_action_counts(
        self,
        scope: AnalyticsScope,
        start: datetime,
        end: datetime
    ) -> Dict[str, int]:
        """Group usage log events in the window by action."""
        query = (
            select(UsageLog.action, func.count(UsageLog.id))
            .where(*_scoped(UsageLog, scope, start, end))
            .group_by(UsageLog.action)
        )
        async with self._session_scope() as session:
            result = await session.execute(query)
            return {action: int(count) for action, count in result.all()}

    async def usage_events(
        self,
        scope: AnalyticsScope,
        start: datetime,
        end: datetime
    ) -> List[Tuple[str, datetime]]:
        """(action, created_at) pairs in the window, oldest first."""
        query = (
            select(UsageLog.action, UsageLog.created_at)
            .where(*_scoped(UsageLog, scope, start, end))
            .order_by(UsageLog.created_at.asc())
        )
        async with self._session_scope() as session:
            result = await session.execute(query)
            return [(action, created_at) for action, created_at in result.all()]

    async def list_contracts(
        self,
        scope: AnalyticsScope,
        start: datetime,
        end: datetime
    ) -> List[Contract]:
        """Live contracts created in the window, newest first."""
        query = (
            select(Contract)
            .where(*_scoped(Contract, scope, start, end), Contract.deleted_at.is_(None))
            .order_by(Contract.created_at.desc())
        )
        async with self._session_scope() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def list_analyses(
        self,
        scope: AnalyticsScope,
        start: datetime,
        end: datetime
    ) -> List[Tuple[AnalysisResult, str]]:
        """Analyses created in the window with their contract's file name, newest first."""
        query = (
            select(AnalysisResult, Contract.file_name)
            .join(Contract, AnalysisResult.contract_id == Contract.id)
            .where(*_scoped(AnalysisResult, scope, start, end))
            .order_by(AnalysisResult.created_at.desc())
        )
        async with self._session_scope() as session:
            result = await session.execute(query)
            rows = [(analysis, file_name) for analysis, file_name in result.all()]

        logger.debug(f"Loaded {len(rows)} analyses for user {scope.user_id}")
        return rows
