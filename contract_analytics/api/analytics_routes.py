"""
Analytics Routes

Dashboard trend endpoint: metric deltas, daily usage series and
performance trends for the authenticated user.
"""

import asyncio
from datetime import timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from contract_analytics.analytics import (
    InvalidComparisonError,
    InvalidPeriodError,
    TrendOptions,
    calculate_analytics_trends,
    calculate_performance_trends,
    calculate_time_series_data,
)
from contract_analytics.analytics.date_ranges import COMPARISONS, PERIODS, utc_now
from contract_analytics.api.auth import get_current_user_id
from contract_analytics.api.dependencies import get_analytics_repository
from contract_analytics.core.db import AnalyticsRepository
from contract_analytics.core.logging import setup_logger

logger = setup_logger("INFO")

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/trends")
async def get_trends(
    period: str = Query(default="month"),
    compare_with: str = Query(default="previous", alias="compareWith"),
    organization_id: Optional[str] = Query(default=None, alias="organizationId"),
    user_id: str = Depends(get_current_user_id),
    repository: AnalyticsRepository = Depends(get_analytics_repository),
):
    """
    Current vs. comparison period trends.

    Query params:
        period: week | month | year (default month)
        compareWith: previous | same_period_last_year (default previous)
        organizationId: Optional organization scope

    Example response:
        {
            "success": true,
            "trends": {"contracts": {"current": 120, "previous": 100, "change": 20,
                                     "percentage": 20.0, "trend": "up", "period": "current"}, ...},
            "timeSeriesData": {"2024-03-04": {"contract_upload": 3}},
            "performanceTrends": {"processingTime": {...}, ...},
            "period": "month",
            "compareWith": "previous",
            "calculatedAt": "2024-03-05T10:00:00+00:00"
        }
    """
    if period not in PERIODS:
        raise HTTPException(status_code=400, detail="Invalid period. Must be week, month, or year")

    if compare_with not in COMPARISONS:
        raise HTTPException(
            status_code=400,
            detail="Invalid compareWith. Must be previous or same_period_last_year"
        )

    options = TrendOptions(
        user_id=user_id,
        organization_id=organization_id,
        period=period,
        compare_with=compare_with,
    )

    # Single reference moment for every window below
    now = utc_now()

    try:
        trends, time_series, performance = await asyncio.gather(
            calculate_analytics_trends(options, repository, now=now),
            calculate_time_series_data(options, repository, now=now),
            calculate_performance_trends(options, repository, now=now),
        )
    except (InvalidPeriodError, InvalidComparisonError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error calculating analytics trends: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to calculate trends")

    return {
        "success": True,
        "trends": trends.to_dict(),
        "timeSeriesData": time_series,
        "performanceTrends": {key: trend.to_dict() for key, trend in performance.items()},
        "period": period,
        "compareWith": compare_with,
        "calculatedAt": now.replace(tzinfo=timezone.utc).isoformat(),
    }
