"""
Report Data — assemble the report bundle for a user and date range.

Loads contracts, analyses and usage counts for the window concurrently
and reduces them to the overview, usage, performance, cost and risk
sections consumed by the exporters.
"""

import asyncio
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Tuple

from contract_analytics.core.db.models import AnalysisResult, AnalysisStatus
from contract_analytics.core.db.repository import AnalyticsRepository, AnalyticsScope
from contract_analytics.core.logging import setup_logger
from contract_analytics.export.export_schema import DateRange, ExportOptions, ReportData, parse_report_date

logger = setup_logger("INFO")

# Usage-log action names counted in the usage section
USAGE_ACTIONS = {
    "uploads": "contract_upload",
    "analyses": "analysis_started",
    "exports": "export_downloaded",
    "logins": "user_login",
}


def _is_date_only(value: str) -> bool:
    try:
        date.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def report_window(date_range: DateRange) -> Tuple[datetime, datetime]:
    """
    Convert an inclusive dashboard range into a half-open query window.

    A date-only end ("2024-03-31", or "20240331" where the interpreter
    accepts basic format) covers that whole day; a datetime end is
    included as-is.
    """
    start = parse_report_date(date_range.start)
    end = parse_report_date(date_range.end)
    if _is_date_only(date_range.end):
        end = end + timedelta(days=1)
    else:
        end = end + timedelta(microseconds=1)
    return start, end


def _average(values: List[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0


def summarize_analyses(
    contracts_count: int,
    analyses: List[Tuple[AnalysisResult, str]],
    usage_counts: Dict[str, int]
) -> ReportData:
    """Reduce loaded rows to the report sections."""
    results = [analysis for analysis, _ in analyses]
    total = len(results)

    processing_times = [a.processing_time or 0 for a in results]
    tokens = [a.tokens_used or 0 for a in results]
    costs = [float(a.estimated_cost or 0) for a in results]
    completed = sum(1 for a in results if a.status == AnalysisStatus.COMPLETED.value)
    total_cost = round(sum(costs), 4)

    overview = {
        "totalContracts": contracts_count,
        "totalAnalyses": total,
        "averageAnalysisTime": _average(processing_times),
        "successRate": f"{completed / total * 100:.1f}%" if total else "0%",
    }

    usage = {key: usage_counts.get(action, 0) for key, action in USAGE_ACTIONS.items()}

    performance = {
        "averageTokensUsed": _average(tokens),
        "totalCost": total_cost,
        "fastestAnalysis": min(processing_times) if processing_times else 0,
        "slowestAnalysis": max(processing_times) if processing_times else 0,
    }

    cost = {
        "totalCost": total_cost,
        "averageCostPerAnalysis": round(total_cost / total, 4) if total else 0,
        "totalTokensUsed": sum(tokens),
    }

    riskiest = "N/A"
    if analyses:
        top_analysis, top_file = max(analyses, key=lambda row: row[0].high_risk_count or 0)
        if (top_analysis.high_risk_count or 0) > 0:
            riskiest = top_file

    risk = {
        "highRiskContracts": sum(1 for a in results if (a.high_risk_count or 0) > 0),
        "criticalRiskContracts": sum(1 for a in results if (a.critical_risk_count or 0) > 0),
        "totalRisks": sum((a.high_risk_count or 0) + (a.critical_risk_count or 0) for a in results),
        "riskiestContract": riskiest,
    }

    return ReportData(overview=overview, usage=usage, performance=performance, cost=cost, risk=risk)


async def fetch_report_data(options: ExportOptions, repository: AnalyticsRepository) -> ReportData:
    """
    Load and summarize report data for the options' owner and date range.

    Args:
        options: Export options carrying scope and date range
        repository: Data access

    Returns:
        ReportData with overview, usage, performance, cost and risk sections
    """
    scope = AnalyticsScope(user_id=options.user_id, organization_id=options.organization_id)
    start, end = report_window(options.date_range)

    contracts, analyses, usage_counts = await asyncio.gather(
        repository.list_contracts(scope, start, end),
        repository.list_analyses(scope, start, end),
        repository.usage_action_counts(scope, start, end),
    )

    logger.info(
        f"Report data loaded for user {options.user_id}: "
        f"{len(contracts)} contracts, {len(analyses)} analyses"
    )

    return summarize_analyses(len(contracts), analyses, usage_counts)


def build_analysis_rows(analyses: List[Tuple[AnalysisResult, str]]) -> List[Dict[str, Any]]:
    """Flatten analyses into uniform records for CSV export."""
    rows = []
    for analysis, file_name in analyses:
        rows.append({
            "analysisId": analysis.id,
            "fileName": file_name,
            "status": analysis.status,
            "analysisType": analysis.analysis_type or "N/A",
            "processingTime": analysis.processing_time,
            "tokensUsed": analysis.tokens_used,
            "estimatedCost": float(analysis.estimated_cost) if analysis.estimated_cost is not None else None,
            "highRiskCount": analysis.high_risk_count,
            "criticalRiskCount": analysis.critical_risk_count,
            "createdAt": analysis.created_at.date().isoformat() if analysis.created_at else None,
        })
    return rows


async def fetch_analysis_rows(options: ExportOptions, repository: AnalyticsRepository) -> List[Dict[str, Any]]:
    """Load the analyses in the options' window as CSV-ready records."""
    scope = AnalyticsScope(user_id=options.user_id, organization_id=options.organization_id)
    start, end = report_window(options.date_range)
    return build_analysis_rows(await repository.list_analyses(scope, start, end))
