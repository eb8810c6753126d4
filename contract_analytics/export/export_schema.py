"""
Export Schema — Report bundle, export options and the metadata envelope.

Every export carries the same metadata block:
- exportType: Report type requested by the caller
- dateRange: Reporting window ({start, end})
- generatedAt: ISO-8601 UTC timestamp
- userId / organizationId: Owner scope
"""

from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

ExportFormat = Literal["pdf", "csv", "json"]

# Fixed order in which report sections are rendered
SECTION_TITLES = {
    "overview": "Overview",
    "usage": "Usage Analytics",
    "performance": "Performance Metrics",
    "cost": "Cost Analysis",
    "risk": "Risk Assessment",
}

MEDIA_TYPES = {
    "pdf": "application/pdf",
    "csv": "text/csv",
    "json": "application/json",
}


class DateRange(BaseModel):
    """Reporting window as sent by the dashboard (ISO date or datetime strings)."""
    start: str
    end: str


class ReportData(BaseModel):
    """
    Pre-fetched report bundle.

    Each section is an optional key -> value record; values are usually
    scalars but nested values are rendered as JSON.
    """
    overview: Optional[Dict[str, Any]] = None
    usage: Optional[Dict[str, Any]] = None
    performance: Optional[Dict[str, Any]] = None
    cost: Optional[Dict[str, Any]] = None
    risk: Optional[Dict[str, Any]] = None
    custom: Optional[Dict[str, Any]] = None

    def sections(self):
        """Yield (title, values) for present sections in render order."""
        for key, title in SECTION_TITLES.items():
            values = getattr(self, key)
            if values is not None:
                yield title, values


class ExportOptions(BaseModel):
    """Caller-supplied export parameters."""
    model_config = ConfigDict(populate_by_name=True)

    format: ExportFormat = "pdf"
    template: str
    date_range: DateRange = Field(..., alias="dateRange")
    report_type: str = Field(..., alias="reportType")
    user_id: str = Field(..., alias="userId")
    organization_id: Optional[str] = Field(default=None, alias="organizationId")


def create_export_metadata(options: ExportOptions) -> Dict[str, Any]:
    """
    Create the standard metadata envelope for an export.

    Args:
        options: Export options for the report being generated

    Returns:
        Metadata dict with camelCase keys
    """
    return {
        "exportType": options.report_type,
        "dateRange": {"start": options.date_range.start, "end": options.date_range.end},
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "userId": options.user_id,
        "organizationId": options.organization_id,
    }


def parse_report_date(value: str) -> datetime:
    """
    Parse an ISO date/datetime string into a naive UTC datetime.

    Accepts a trailing "Z" designator.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_date_range(date_range: DateRange) -> str:
    """Human readable "YYYY-MM-DD - YYYY-MM-DD" label."""
    start = parse_report_date(date_range.start).date().isoformat()
    end = parse_report_date(date_range.end).date().isoformat()
    return f"{start} - {end}"
