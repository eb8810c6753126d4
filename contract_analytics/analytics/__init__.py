"""
Analytics module for dashboard trend calculations.
"""

from .date_ranges import (
    DateWindow,
    PeriodWindows,
    InvalidPeriodError,
    InvalidComparisonError,
    calculate_date_ranges,
)
from .trends import (
    TrendOptions,
    TrendData,
    AnalyticsTrends,
    calculate_trend,
    calculate_analytics_trends,
    calculate_time_series_data,
    calculate_performance_trends,
    get_trend_summary,
    get_trend_icon,
)

__all__ = [
    "DateWindow",
    "PeriodWindows",
    "InvalidPeriodError",
    "InvalidComparisonError",
    "calculate_date_ranges",
    "TrendOptions",
    "TrendData",
    "AnalyticsTrends",
    "calculate_trend",
    "calculate_analytics_trends",
    "calculate_time_series_data",
    "calculate_performance_trends",
    "get_trend_summary",
    "get_trend_icon",
]
