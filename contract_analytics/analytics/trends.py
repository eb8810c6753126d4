"""
Analytics Trends — current vs. comparison period deltas

Computes eight dashboard metrics for a user (optionally narrowed to one
organization) over the current reporting window and the window it is
compared against:

- contracts, analyses: row counts
- uploads, views: user activity counts
- processingTime, risks: averages over analyses
- costs: summed estimated cost
- successRate: completed / all analyses, as a percentage

All metrics run concurrently and every metric issues its two window
queries concurrently. Nothing is written; query errors propagate.
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from contract_analytics.analytics.date_ranges import (
    DateWindow,
    PeriodWindows,
    calculate_date_ranges,
)
from contract_analytics.core.db.models import AnalysisStatus
from contract_analytics.core.db.repository import AnalyticsRepository, AnalyticsScope
from contract_analytics.core.logging import setup_logger

logger = setup_logger("INFO")

UPLOAD_ACTIVITY = "contract_uploaded"
VIEW_ACTIVITY = "contract_viewed"

# |percentage| below this is reported as stable
STABLE_THRESHOLD = 1

WindowQuery = Callable[[DateWindow], Awaitable[Optional[float]]]


@dataclass(frozen=True)
class TrendOptions:
    user_id: str
    organization_id: Optional[str] = None
    period: str = "month"
    compare_with: str = "previous"

    @property
    def scope(self) -> AnalyticsScope:
        return AnalyticsScope(user_id=self.user_id, organization_id=self.organization_id)


@dataclass(frozen=True)
class TrendData:
    current: float
    previous: float
    change: float
    percentage: float
    trend: str
    period: str = "current"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current,
            "previous": self.previous,
            "change": self.change,
            "percentage": self.percentage,
            "trend": self.trend,
            "period": self.period,
        }


@dataclass(frozen=True)
class AnalyticsTrends:
    contracts: TrendData
    analyses: TrendData
    uploads: TrendData
    views: TrendData
    processing_time: TrendData
    costs: TrendData
    risks: TrendData
    success_rate: TrendData

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Serialize with the camelCase keys the dashboard reads."""
        return {
            "contracts": self.contracts.to_dict(),
            "analyses": self.analyses.to_dict(),
            "uploads": self.uploads.to_dict(),
            "views": self.views.to_dict(),
            "processingTime": self.processing_time.to_dict(),
            "costs": self.costs.to_dict(),
            "risks": self.risks.to_dict(),
            "successRate": self.success_rate.to_dict(),
        }


def calculate_trend(current: float, previous: float) -> TrendData:
    """
    Compare a metric across two windows.

    percentage is (change / previous) * 100 rounded to 2 places, or 0 when
    there is no previous value to compare against.

    Example:
        >>> calculate_trend(120, 100).percentage
        20.0
    """
    change = current - previous
    percentage = round((change / previous) * 100, 2) if previous != 0 else 0

    if abs(percentage) < STABLE_THRESHOLD:
        trend = "stable"
    elif percentage > 0:
        trend = "up"
    else:
        trend = "down"

    return TrendData(
        current=current,
        previous=previous,
        change=change,
        percentage=percentage,
        trend=trend,
    )


def success_rate(status_counts: Dict[str, int]) -> float:
    """Completed share of all analyses as a percentage; 0 for an empty window."""
    total = sum(status_counts.values())
    if total == 0:
        return 0
    completed = status_counts.get(AnalysisStatus.COMPLETED.value, 0)
    return (completed / total) * 100


async def _compare(windows: PeriodWindows, query: WindowQuery) -> TrendData:
    current, previous = await asyncio.gather(
        query(windows.current),
        query(windows.previous),
    )
    return calculate_trend(current or 0, previous or 0)


async def calculate_analytics_trends(
    options: TrendOptions,
    repository: AnalyticsRepository,
    now: Optional[datetime] = None
) -> AnalyticsTrends:
    """
    Calculate all eight metric trends for the requested period.

    Args:
        options: Scope, period and comparison mode
        repository: Data access for the scoped aggregate queries
        now: Reference moment for window derivation (defaults to now)

    Returns:
        AnalyticsTrends keyed by metric

    Raises:
        InvalidPeriodError: Before any query is issued
    """
    windows = calculate_date_ranges(options.period, options.compare_with, now)
    scope = options.scope

    logger.info(
        f"Calculating {options.period} trends for user {options.user_id} "
        f"(compare_with={options.compare_with}, organization={options.organization_id})"
    )

    async def contracts(window: DateWindow):
        return await repository.count_contracts(scope, window.start, window.end)

    async def analyses(window: DateWindow):
        return await repository.count_analyses(scope, window.start, window.end)

    async def uploads(window: DateWindow):
        return await repository.count_activities(scope, UPLOAD_ACTIVITY, window.start, window.end)

    async def views(window: DateWindow):
        return await repository.count_activities(scope, VIEW_ACTIVITY, window.start, window.end)

    async def processing_time(window: DateWindow):
        return await repository.aggregate_analyses(scope, "avg", "processing_time", window.start, window.end)

    async def costs(window: DateWindow):
        return await repository.aggregate_analyses(scope, "sum", "estimated_cost", window.start, window.end)

    async def risks(window: DateWindow):
        return await repository.aggregate_analyses(scope, "avg", "high_risk_count", window.start, window.end)

    async def completion_rate(window: DateWindow):
        return success_rate(await repository.analysis_status_counts(scope, window.start, window.end))

    results = await asyncio.gather(
        _compare(windows, contracts),
        _compare(windows, analyses),
        _compare(windows, uploads),
        _compare(windows, views),
        _compare(windows, processing_time),
        _compare(windows, costs),
        _compare(windows, risks),
        _compare(windows, completion_rate),
    )

    return AnalyticsTrends(*results)


async def calculate_time_series_data(
    options: TrendOptions,
    repository: AnalyticsRepository,
    now: Optional[datetime] = None
) -> Dict[str, Dict[str, int]]:
    """
    Daily usage-log counts for the current window, for charting.

    Returns:
        {"YYYY-MM-DD": {action: count}} in ascending date order
    """
    windows = calculate_date_ranges(options.period, options.compare_with, now)
    events = await repository.usage_events(options.scope, windows.current.start, windows.current.end)

    daily: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for action, created_at in events:
        daily[created_at.date().isoformat()][action] += 1

    return {day: dict(daily[day]) for day in sorted(daily)}


async def calculate_performance_trends(
    options: TrendOptions,
    repository: AnalyticsRepository,
    now: Optional[datetime] = None
) -> Dict[str, TrendData]:
    """Processing time (avg/min/max) and confidence trends for timed analyses."""
    windows = calculate_date_ranges(options.period, options.compare_with, now)

    current, previous = await asyncio.gather(
        repository.performance_aggregate(options.scope, windows.current.start, windows.current.end),
        repository.performance_aggregate(options.scope, windows.previous.start, windows.previous.end),
    )

    def trend(key: str) -> TrendData:
        return calculate_trend(current[key] or 0, previous[key] or 0)

    return {
        "processingTime": trend("avg_processing_time"),
        "confidenceScore": trend("avg_confidence_score"),
        "minProcessingTime": trend("min_processing_time"),
        "maxProcessingTime": trend("max_processing_time"),
    }


def get_trend_summary(trend: TrendData) -> str:
    """Signed percentage label, e.g. "+20.0%"."""
    sign = "+" if trend.trend == "up" else "-" if trend.trend == "down" else ""
    return f"{sign}{abs(trend.percentage)}%"


def get_trend_icon(trend: TrendData) -> str:
    """Icon name for the trend direction."""
    if trend.trend == "up":
        return "trending-up"
    if trend.trend == "down":
        return "trending-down"
    return "minus"
