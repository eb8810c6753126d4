"""
Tests for reporting window derivation.
"""

from datetime import datetime, timedelta

import pytest

from contract_analytics.analytics.date_ranges import (
    DateWindow,
    InvalidComparisonError,
    InvalidPeriodError,
    calculate_date_ranges,
)


class TestWeekWindows:
    """Weeks start on Monday 00:00 and span seven days."""

    @pytest.mark.parametrize("day", range(11, 18))
    def test_every_weekday_maps_to_same_monday(self, day):
        """Test Monday through Sunday of one week share the same window."""
        now = datetime(2024, 3, day, 15, 30)

        windows = calculate_date_ranges("week", now=now)

        assert windows.current == DateWindow(datetime(2024, 3, 11), datetime(2024, 3, 18))
        assert windows.current.days == 7
        assert windows.current.start.weekday() == 0

    def test_sunday_stays_in_current_week(self):
        """Test a Sunday is the last day of its week, not the start of the next."""
        windows = calculate_date_ranges("week", now=datetime(2024, 3, 17, 23, 59))

        assert windows.current.start == datetime(2024, 3, 11)
        assert windows.current.start <= datetime(2024, 3, 17, 23, 59) < windows.current.end

    def test_previous_week_is_adjacent(self):
        """Test previous week ends exactly where the current week starts."""
        windows = calculate_date_ranges("week", "previous", now=datetime(2024, 3, 13))

        assert windows.previous == DateWindow(datetime(2024, 3, 4), datetime(2024, 3, 11))
        assert windows.previous.end == windows.current.start

    def test_same_period_last_year(self):
        """Test week comparison uses the same month/day one year back."""
        windows = calculate_date_ranges("week", "same_period_last_year", now=datetime(2024, 3, 13))

        assert windows.previous.start == datetime(2023, 3, 11)
        assert windows.previous.end == datetime(2023, 3, 18)

    def test_leap_day_week_start_clamps_to_feb_28(self):
        """Test a week starting Feb 29 compares against Feb 28 of the prior year."""
        # 2016-02-29 was a Monday
        windows = calculate_date_ranges("week", "same_period_last_year", now=datetime(2016, 3, 2))

        assert windows.current.start == datetime(2016, 2, 29)
        assert windows.previous.start == datetime(2015, 2, 28)
        assert windows.previous.end - windows.previous.start == timedelta(days=7)


class TestMonthWindows:
    """Months are calendar-aligned."""

    def test_current_and_previous_month(self):
        """Test March compares against February."""
        windows = calculate_date_ranges("month", now=datetime(2024, 3, 15, 12))

        assert windows.current == DateWindow(datetime(2024, 3, 1), datetime(2024, 4, 1))
        assert windows.previous == DateWindow(datetime(2024, 2, 1), datetime(2024, 3, 1))

    def test_january_rolls_back_to_december(self):
        """Test previous month crosses the year boundary."""
        windows = calculate_date_ranges("month", now=datetime(2024, 1, 10))

        assert windows.previous == DateWindow(datetime(2023, 12, 1), datetime(2024, 1, 1))

    def test_december_ends_next_january(self):
        """Test current December ends on January 1 of the next year."""
        windows = calculate_date_ranges("month", now=datetime(2023, 12, 5))

        assert windows.current.end == datetime(2024, 1, 1)

    def test_same_period_last_year(self):
        """Test month comparison uses the same calendar month a year back."""
        windows = calculate_date_ranges("month", "same_period_last_year", now=datetime(2024, 3, 15))

        assert windows.previous == DateWindow(datetime(2023, 3, 1), datetime(2023, 4, 1))


class TestYearWindows:
    """Years are calendar-aligned and always compare to the prior year."""

    @pytest.mark.parametrize("compare_with", ["previous", "same_period_last_year"])
    def test_year_windows(self, compare_with):
        """Test both comparisons resolve to the previous calendar year."""
        windows = calculate_date_ranges("year", compare_with, now=datetime(2024, 6, 30))

        assert windows.current == DateWindow(datetime(2024, 1, 1), datetime(2025, 1, 1))
        assert windows.previous == DateWindow(datetime(2023, 1, 1), datetime(2024, 1, 1))


class TestValidation:
    """Unknown periods and comparisons are rejected."""

    def test_invalid_period(self):
        """Test unknown period raises InvalidPeriodError."""
        with pytest.raises(InvalidPeriodError) as exc_info:
            calculate_date_ranges("day")

        assert str(exc_info.value) == "Invalid period: day"
        assert exc_info.value.period == "day"

    def test_invalid_period_is_value_error(self):
        """Test callers can catch ValueError."""
        with pytest.raises(ValueError):
            calculate_date_ranges("quarter")

    def test_invalid_comparison(self):
        """Test unknown comparison raises InvalidComparisonError."""
        with pytest.raises(InvalidComparisonError):
            calculate_date_ranges("month", "next")
