"""
Reporting windows for trend comparison.

A window is half-open: [start, end). Weeks run Monday 00:00 to the
following Monday 00:00, months and years are calendar-aligned.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal, Optional

Period = Literal["week", "month", "year"]
Comparison = Literal["previous", "same_period_last_year"]

PERIODS = ("week", "month", "year")
COMPARISONS = ("previous", "same_period_last_year")


class InvalidPeriodError(ValueError):
    """Raised for a period other than week, month or year."""

    def __init__(self, period):
        self.period = period
        super().__init__(f"Invalid period: {period}")


class InvalidComparisonError(ValueError):
    """Raised for a comparison other than previous or same_period_last_year."""

    def __init__(self, compare_with):
        self.compare_with = compare_with
        super().__init__(f"Invalid compareWith: {compare_with}")


@dataclass(frozen=True)
class DateWindow:
    start: datetime
    end: datetime

    @property
    def days(self) -> int:
        return (self.end - self.start).days


@dataclass(frozen=True)
class PeriodWindows:
    """Current window plus the window it is compared against."""
    current: DateWindow
    previous: DateWindow


def utc_now() -> datetime:
    """Naive UTC timestamp, matching how created_at columns are stored."""
    return datetime.utcnow()


def _shift_years(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        # Feb 29 has no counterpart in a non-leap year
        return moment.replace(year=moment.year + years, day=28)


def _month_start(year: int, month: int) -> datetime:
    # Normalizes month overflow in either direction (0 -> previous December, 13 -> next January)
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return datetime(year, month, 1)


def calculate_date_ranges(
    period: str,
    compare_with: str = "previous",
    now: Optional[datetime] = None
) -> PeriodWindows:
    """
    Derive the current and comparison windows for a reporting period.

    Args:
        period: "week", "month" or "year"
        compare_with: "previous" for the immediately preceding window,
            "same_period_last_year" for the same calendar window a year back
        now: Reference moment (defaults to the current UTC time)

    Returns:
        PeriodWindows with half-open current and previous windows

    Raises:
        InvalidPeriodError: Unknown period
        InvalidComparisonError: Unknown comparison
    """
    if period not in PERIODS:
        raise InvalidPeriodError(period)
    if compare_with not in COMPARISONS:
        raise InvalidComparisonError(compare_with)

    now = now or utc_now()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == "week":
        current_start = today - timedelta(days=today.weekday())
        current = DateWindow(current_start, current_start + timedelta(days=7))

        if compare_with == "previous":
            previous = DateWindow(current_start - timedelta(days=7), current_start)
        else:
            # Same month/day one year back, not the aligned ISO week
            previous_start = _shift_years(current_start, -1)
            previous = DateWindow(previous_start, previous_start + timedelta(days=7))

    elif period == "month":
        current = DateWindow(
            _month_start(now.year, now.month),
            _month_start(now.year, now.month + 1),
        )

        if compare_with == "previous":
            previous = DateWindow(_month_start(now.year, now.month - 1), current.start)
        else:
            previous = DateWindow(
                _month_start(now.year - 1, now.month),
                _month_start(now.year - 1, now.month + 1),
            )

    else:
        current = DateWindow(datetime(now.year, 1, 1), datetime(now.year + 1, 1, 1))
        # Both comparisons resolve to the previous calendar year
        previous = DateWindow(datetime(now.year - 1, 1, 1), current.start)

    return PeriodWindows(current=current, previous=previous)
