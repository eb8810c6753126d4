"""
Integration tests for trend calculation against a real (SQLite) database.

Reference moment is Friday 2024-03-15 12:00, so the month windows are
March (current) and February (previous).
"""

from datetime import datetime

import pytest

from contract_analytics.analytics import (
    InvalidPeriodError,
    TrendOptions,
    calculate_analytics_trends,
    calculate_performance_trends,
    calculate_time_series_data,
)
from contract_analytics.core.db import AnalysisResult, Contract, UsageLog, UserActivity

NOW = datetime(2024, 3, 15, 12, 0)


def contract(id, created_at, user_id="user-1", organization_id=None, deleted_at=None):
    return Contract(
        id=id,
        user_id=user_id,
        organization_id=organization_id,
        file_name=f"{id}.pdf",
        created_at=created_at,
        deleted_at=deleted_at,
    )


def analysis(id, created_at, status="COMPLETED", processing_time=None, cost=None,
             high_risk=None, confidence=None, user_id="user-1", contract_id="c-base"):
    return AnalysisResult(
        id=id,
        contract_id=contract_id,
        user_id=user_id,
        status=status,
        processing_time=processing_time,
        estimated_cost=cost,
        high_risk_count=high_risk,
        confidence_score=confidence,
        created_at=created_at,
    )


def activity(activity_type, created_at, user_id="user-1"):
    return UserActivity(user_id=user_id, activity_type=activity_type, created_at=created_at)


def usage(action, created_at, user_id="user-1"):
    return UsageLog(user_id=user_id, action=action, created_at=created_at)


@pytest.fixture
def seeded(seed):
    async def _seeded():
        await seed(
            contract("c-base", datetime(2023, 6, 1)),
            # March: 3 live, 1 soft-deleted
            contract("c1", datetime(2024, 3, 1, 0, 0)),
            contract("c2", datetime(2024, 3, 10)),
            contract("c3", datetime(2024, 3, 31, 23, 59)),
            contract("c4", datetime(2024, 3, 12), deleted_at=datetime(2024, 3, 13)),
            # February: 2
            contract("c5", datetime(2024, 2, 3)),
            contract("c6", datetime(2024, 2, 29, 23, 59)),
            # Outside both windows / other owner
            contract("c7", datetime(2024, 4, 1, 0, 0)),
            contract("c8", datetime(2024, 3, 5), user_id="user-2"),

            analysis("a1", datetime(2024, 3, 2), processing_time=1000, cost=0.5, high_risk=2, confidence=0.8),
            analysis("a2", datetime(2024, 3, 9), processing_time=3000, cost=1.5, high_risk=4, confidence=0.9),
            analysis("a3", datetime(2024, 3, 11), status="FAILED"),
            analysis("b1", datetime(2024, 2, 14), processing_time=2000, cost=1.0, high_risk=3, confidence=0.85),
            analysis("x1", datetime(2024, 3, 3), processing_time=99999, cost=50, user_id="user-2"),

            activity("contract_uploaded", datetime(2024, 3, 2)),
            activity("contract_uploaded", datetime(2024, 3, 6)),
            activity("contract_uploaded", datetime(2024, 2, 2)),
            activity("contract_uploaded", datetime(2024, 2, 9)),
            activity("contract_uploaded", datetime(2024, 2, 16)),
            activity("contract_uploaded", datetime(2024, 2, 23)),
            activity("contract_viewed", datetime(2024, 3, 7), user_id="user-2"),
        )

    return _seeded


class TestAnalyticsTrends:
    """Test the eight dashboard metrics."""

    @pytest.mark.asyncio
    async def test_monthly_trends(self, repository, seeded):
        """Test every metric compares March against February."""
        await seeded()

        trends = await calculate_analytics_trends(TrendOptions(user_id="user-1"), repository, now=NOW)

        assert (trends.contracts.current, trends.contracts.previous) == (3, 2)
        assert trends.contracts.percentage == 50.0
        assert trends.contracts.trend == "up"

        assert (trends.analyses.current, trends.analyses.previous) == (3, 1)
        assert trends.analyses.percentage == 200.0

        assert (trends.uploads.current, trends.uploads.previous) == (2, 4)
        assert trends.uploads.percentage == -50.0
        assert trends.uploads.trend == "down"

        assert (trends.views.current, trends.views.previous) == (0, 0)
        assert trends.views.trend == "stable"

        # NULL processing times are excluded from the average
        assert trends.processing_time.current == pytest.approx(2000)
        assert trends.processing_time.trend == "stable"

        assert trends.costs.current == pytest.approx(2.0)
        assert trends.costs.previous == pytest.approx(1.0)
        assert trends.costs.trend == "up"

        assert trends.risks.current == pytest.approx(3.0)
        assert trends.risks.trend == "stable"

        assert trends.success_rate.current == pytest.approx(200 / 3)
        assert trends.success_rate.previous == pytest.approx(100.0)
        assert trends.success_rate.percentage == -33.33
        assert trends.success_rate.trend == "down"

    @pytest.mark.asyncio
    async def test_empty_database(self, repository):
        """Test all metrics are zero and stable without data."""
        trends = await calculate_analytics_trends(TrendOptions(user_id="user-1"), repository, now=NOW)

        for value in trends.to_dict().values():
            assert value["current"] == 0
            assert value["previous"] == 0
            assert value["trend"] == "stable"

    @pytest.mark.asyncio
    async def test_organization_scope(self, repository, seed):
        """Test organizationId narrows every query."""
        await seed(
            contract("o1", datetime(2024, 3, 2), organization_id="org-a"),
            contract("o2", datetime(2024, 3, 3), organization_id="org-a"),
            contract("o3", datetime(2024, 3, 4), organization_id="org-b"),
        )

        scoped = await calculate_analytics_trends(
            TrendOptions(user_id="user-1", organization_id="org-a"), repository, now=NOW
        )
        unscoped = await calculate_analytics_trends(TrendOptions(user_id="user-1"), repository, now=NOW)

        assert scoped.contracts.current == 2
        assert unscoped.contracts.current == 3

    @pytest.mark.asyncio
    async def test_same_period_last_year(self, repository, seed):
        """Test compareWith=same_period_last_year reads March of the prior year."""
        await seed(
            contract("y1", datetime(2024, 3, 2)),
            contract("y2", datetime(2023, 3, 20)),
            contract("y3", datetime(2023, 3, 21)),
            contract("y4", datetime(2024, 2, 10)),
        )

        trends = await calculate_analytics_trends(
            TrendOptions(user_id="user-1", compare_with="same_period_last_year"), repository, now=NOW
        )

        assert (trends.contracts.current, trends.contracts.previous) == (1, 2)

    @pytest.mark.asyncio
    async def test_invalid_period_before_queries(self, repository):
        """Test validation fails before touching the database."""
        class ExplodingRepository:
            def __getattr__(self, name):
                raise AssertionError(f"unexpected query: {name}")

        with pytest.raises(InvalidPeriodError):
            await calculate_analytics_trends(TrendOptions(user_id="user-1", period="day"), ExplodingRepository())


class TestTimeSeries:
    """Test daily usage buckets."""

    @pytest.mark.asyncio
    async def test_daily_counts(self, repository, seed):
        """Test events are grouped per day and action, in date order."""
        await seed(
            usage("contract_upload", datetime(2024, 3, 5, 9, 0)),
            usage("contract_upload", datetime(2024, 3, 4, 10, 0)),
            usage("contract_upload", datetime(2024, 3, 4, 15, 0)),
            usage("analysis_started", datetime(2024, 3, 4, 16, 0)),
            usage("contract_upload", datetime(2024, 2, 27)),
            usage("contract_upload", datetime(2024, 3, 6), user_id="user-2"),
        )

        series = await calculate_time_series_data(TrendOptions(user_id="user-1"), repository, now=NOW)

        assert series == {
            "2024-03-04": {"contract_upload": 2, "analysis_started": 1},
            "2024-03-05": {"contract_upload": 1},
        }
        assert list(series) == ["2024-03-04", "2024-03-05"]


class TestPerformanceTrends:
    """Test processing time and confidence trends."""

    @pytest.mark.asyncio
    async def test_performance(self, repository, seeded):
        """Test avg/min/max processing time compare across windows."""
        await seeded()

        performance = await calculate_performance_trends(TrendOptions(user_id="user-1"), repository, now=NOW)

        assert set(performance) == {"processingTime", "confidenceScore", "minProcessingTime", "maxProcessingTime"}
        assert performance["processingTime"].trend == "stable"
        assert performance["confidenceScore"].trend == "stable"
        assert (performance["minProcessingTime"].current, performance["minProcessingTime"].previous) == (1000, 2000)
        assert performance["minProcessingTime"].trend == "down"
        assert performance["maxProcessingTime"].current == 3000
        assert performance["maxProcessingTime"].percentage == 50.0
