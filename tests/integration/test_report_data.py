"""
Integration tests for report bundle assembly.
"""

import sys
from datetime import datetime

import pytest

from contract_analytics.core.db import AnalysisResult, Contract, UsageLog
from contract_analytics.export import ExportOptions, build_analysis_rows, fetch_analysis_rows, fetch_report_data
from contract_analytics.export.export_schema import DateRange
from contract_analytics.export.report_data import report_window, summarize_analyses


def make_options(start="2024-03-01", end="2024-03-31", organization_id=None):
    return ExportOptions(
        format="json",
        template="overview",
        date_range=DateRange(start=start, end=end),
        report_type="summary",
        user_id="user-1",
        organization_id=organization_id,
    )


async def seed_march(seed):
    await seed(
        Contract(id="c1", user_id="user-1", file_name="NDA.pdf", created_at=datetime(2024, 3, 2)),
        Contract(id="c2", user_id="user-1", file_name="MSA.pdf", created_at=datetime(2024, 3, 20)),
        Contract(id="c3", user_id="user-1", file_name="Lease.pdf", created_at=datetime(2024, 3, 31, 18, 0)),
        Contract(id="c4", user_id="user-1", file_name="Old.pdf", created_at=datetime(2024, 2, 20)),
        AnalysisResult(
            id="a1", contract_id="c1", user_id="user-1", status="COMPLETED", analysis_type="full",
            processing_time=1000, tokens_used=1500, estimated_cost=0.5,
            high_risk_count=1, critical_risk_count=0, created_at=datetime(2024, 3, 2, 10),
        ),
        AnalysisResult(
            id="a2", contract_id="c2", user_id="user-1", status="COMPLETED", analysis_type="full",
            processing_time=3000, tokens_used=2500, estimated_cost=1.5,
            high_risk_count=4, critical_risk_count=1, created_at=datetime(2024, 3, 20, 10),
        ),
        AnalysisResult(
            id="a3", contract_id="c3", user_id="user-1", status="FAILED",
            created_at=datetime(2024, 3, 31, 18, 30),
        ),
        UsageLog(user_id="user-1", action="contract_upload", created_at=datetime(2024, 3, 2)),
        UsageLog(user_id="user-1", action="contract_upload", created_at=datetime(2024, 3, 20)),
        UsageLog(user_id="user-1", action="export_downloaded", created_at=datetime(2024, 3, 21)),
        UsageLog(user_id="user-1", action="contract_upload", created_at=datetime(2024, 4, 1)),
    )


class TestReportWindow:
    """Test inclusive range to half-open window conversion."""

    def test_date_only_end_covers_whole_day(self):
        start, end = report_window(DateRange(start="2024-03-01", end="2024-03-31"))

        assert start == datetime(2024, 3, 1)
        assert end == datetime(2024, 4, 1)

    @pytest.mark.skipif(sys.version_info < (3, 11), reason="basic-format ISO dates need Python 3.11+")
    def test_basic_format_date_end_covers_whole_day(self):
        _, end = report_window(DateRange(start="2024-03-01", end="20240331"))

        assert end == datetime(2024, 4, 1)

    def test_datetime_end_is_inclusive(self):
        _, end = report_window(DateRange(start="2024-03-01", end="2024-03-31T12:00:00Z"))

        assert end > datetime(2024, 3, 31, 12, 0)
        assert end < datetime(2024, 3, 31, 12, 0, 1)


class TestFetchReportData:
    """Test the report sections built from stored rows."""

    @pytest.mark.asyncio
    async def test_sections(self, repository, seed):
        """Test overview, usage, performance, cost and risk values."""
        await seed_march(seed)

        data = await fetch_report_data(make_options(), repository)

        assert data.overview == {
            "totalContracts": 3,
            "totalAnalyses": 3,
            "averageAnalysisTime": 1333.33,
            "successRate": "66.7%",
        }
        assert data.usage == {"uploads": 2, "analyses": 0, "exports": 1, "logins": 0}
        assert data.performance["averageTokensUsed"] == 1333.33
        assert data.performance["totalCost"] == pytest.approx(2.0)
        assert data.performance["fastestAnalysis"] == 0
        assert data.performance["slowestAnalysis"] == 3000
        assert data.cost["averageCostPerAnalysis"] == pytest.approx(0.6667)
        assert data.cost["totalTokensUsed"] == 4000
        assert data.risk == {
            "highRiskContracts": 2,
            "criticalRiskContracts": 1,
            "totalRisks": 6,
            "riskiestContract": "MSA.pdf",
        }

    @pytest.mark.asyncio
    async def test_empty_range(self, repository):
        """Test a range without rows yields zeroed sections."""
        data = await fetch_report_data(make_options(), repository)

        assert data.overview["successRate"] == "0%"
        assert data.overview["totalAnalyses"] == 0
        assert data.risk["riskiestContract"] == "N/A"
        assert data.cost["averageCostPerAnalysis"] == 0

    @pytest.mark.asyncio
    async def test_organization_scope(self, repository, seed):
        """Test organizationId filters contracts."""
        await seed(
            Contract(id="o1", user_id="user-1", organization_id="org-a", file_name="a.pdf",
                     created_at=datetime(2024, 3, 5)),
            Contract(id="o2", user_id="user-1", organization_id="org-b", file_name="b.pdf",
                     created_at=datetime(2024, 3, 6)),
        )

        data = await fetch_report_data(make_options(organization_id="org-a"), repository)

        assert data.overview["totalContracts"] == 1


class TestAnalysisRows:
    """Test CSV record flattening."""

    @pytest.mark.asyncio
    async def test_rows_newest_first(self, repository, seed):
        """Test rows carry the contract file name and uniform keys."""
        await seed_march(seed)

        rows = await fetch_analysis_rows(make_options(), repository)

        assert [row["analysisId"] for row in rows] == ["a3", "a2", "a1"]
        assert rows[1]["fileName"] == "MSA.pdf"
        assert rows[1]["estimatedCost"] == pytest.approx(1.5)
        assert rows[1]["createdAt"] == "2024-03-20"
        assert rows[0]["analysisType"] == "N/A"
        assert all(list(row) == list(rows[0]) for row in rows)

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.version_info < (3, 11), reason="basic-format ISO dates need Python 3.11+")
    @pytest.mark.parametrize("end", ["2024-03-31", "20240331"])
    async def test_last_day_included_for_date_only_end(self, repository, seed, end):
        """Test analyses on the final day are exported whichever date-only form is used."""
        await seed(
            Contract(id="c1", user_id="user-1", file_name="NDA.pdf", created_at=datetime(2024, 3, 31, 9)),
            AnalysisResult(id="a1", contract_id="c1", user_id="user-1", status="COMPLETED",
                           created_at=datetime(2024, 3, 31, 10)),
        )

        rows = await fetch_analysis_rows(make_options(end=end), repository)

        assert [row["analysisId"] for row in rows] == ["a1"]

    def test_no_analyses(self):
        assert build_analysis_rows([]) == []

    def test_summarize_without_rows(self):
        data = summarize_analyses(0, [], {})

        assert data.performance["fastestAnalysis"] == 0
        assert data.usage == {"uploads": 0, "analyses": 0, "exports": 0, "logins": 0}
