"""
Report Routes

Download endpoints for generated reports:
- POST /reports/generate-pdf: PDF via direct layout or headless browser
- POST /reports/export: PDF, CSV (analysis rows) or JSON (metadata envelope)
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from contract_analytics.api.auth import get_current_user_id
from contract_analytics.api.dependencies import get_analytics_repository, get_browser_renderer
from contract_analytics.core.db import AnalyticsRepository
from contract_analytics.core.logging import setup_logger
from contract_analytics.export import (
    BrowserPdfRenderer,
    DateRange,
    ExportOptions,
    export_report,
    fetch_analysis_rows,
    fetch_report_data,
)
from contract_analytics.export.export_schema import parse_report_date

logger = setup_logger("INFO")

router = APIRouter(prefix="/reports", tags=["Reports"])


class DateRangeRequest(BaseModel):
    start: Optional[str] = None
    end: Optional[str] = None


class GeneratePdfRequest(BaseModel):
    """Request model for PDF generation (camelCase, as sent by the dashboard)."""
    template: Optional[str] = None
    dateRange: Optional[DateRangeRequest] = None
    reportType: Optional[str] = None
    organizationId: Optional[str] = None
    usePuppeteer: bool = False


class ExportRequest(GeneratePdfRequest):
    """Request model for multi-format export."""
    format: Literal["pdf", "csv", "json"] = "json"


def _build_options(request: GeneratePdfRequest, user_id: str, export_format: str) -> ExportOptions:
    """Validate the request body and convert it to ExportOptions."""
    if not request.template or not request.dateRange or not request.reportType:
        raise HTTPException(status_code=400, detail="Missing required parameters")

    if not request.dateRange.start or not request.dateRange.end:
        raise HTTPException(status_code=400, detail="Invalid date range")

    try:
        start = parse_report_date(request.dateRange.start)
        end = parse_report_date(request.dateRange.end)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date range")

    if start > end:
        raise HTTPException(status_code=400, detail="Invalid date range")

    return ExportOptions(
        format=export_format,
        template=request.template,
        date_range=DateRange(start=request.dateRange.start, end=request.dateRange.end),
        report_type=request.reportType,
        user_id=user_id,
        organization_id=request.organizationId,
    )


def _download(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(content)),
        },
    )


@router.post("/generate-pdf")
async def generate_pdf(
    request: GeneratePdfRequest,
    user_id: str = Depends(get_current_user_id),
    repository: AnalyticsRepository = Depends(get_analytics_repository),
    browser_renderer: BrowserPdfRenderer = Depends(get_browser_renderer),
):
    """
    Generate a PDF report for the authenticated user.

    Example:
        POST /reports/generate-pdf
        {
            "template": "overview",
            "dateRange": {"start": "2024-03-01", "end": "2024-03-31"},
            "reportType": "summary",
            "usePuppeteer": false
        }
    """
    options = _build_options(request, user_id, "pdf")

    try:
        report_data = await fetch_report_data(options, repository)
        result = await export_report(
            report_data,
            options,
            browser_renderer=browser_renderer if request.usePuppeteer else None,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating PDF: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to generate PDF")

    return _download(result.content, result.media_type, result.filename)


@router.post("/export")
async def export(
    request: ExportRequest,
    user_id: str = Depends(get_current_user_id),
    repository: AnalyticsRepository = Depends(get_analytics_repository),
    browser_renderer: BrowserPdfRenderer = Depends(get_browser_renderer),
):
    """
    Export report data as PDF, CSV or JSON.

    CSV exports list the analyses in the date range, one row each.
    JSON exports wrap the report bundle in the metadata envelope.
    """
    options = _build_options(request, user_id, request.format)

    try:
        records = None
        if options.format == "csv":
            records = await fetch_analysis_rows(options, repository)
            report_data = None
        else:
            report_data = await fetch_report_data(options, repository)

        result = await export_report(
            report_data,
            options,
            records=records,
            browser_renderer=browser_renderer if request.usePuppeteer else None,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Report export failed: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to export report as {options.format}")

    return _download(result.content, result.media_type, result.filename)
