"""
Report Export Service — CSV, JSON and PDF encodings of report data.

Formats:
- pdf: direct reportlab layout, or headless-browser print when a
  BrowserPdfRenderer is supplied
- csv: flat list of uniform records, built in memory
- json: report bundle wrapped in the metadata envelope

Rendering errors propagate; no partial output is returned.
"""

import csv
import io
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from contract_analytics.core.logging import setup_logger
from contract_analytics.export.browser_pdf import BrowserPdfRenderer, generate_html_template
from contract_analytics.export.export_schema import (
    MEDIA_TYPES,
    ExportOptions,
    ReportData,
    create_export_metadata,
)
from contract_analytics.export.formatting import humanize_key
from contract_analytics.export.pdf_adapter import generate_pdf_report

logger = setup_logger("INFO")

EMPTY_CSV_PLACEHOLDER = b"No data available"

# Characters that would break a quoted Content-Disposition filename
_UNSAFE_FILENAME_CHARS = re.compile(r"[\"\\/\r\n\x00-\x1f]")


@dataclass
class ExportResult:
    content: bytes
    media_type: str
    filename: str


def _csv_cell(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return value


def generate_csv_export(records: List[Dict[str, Any]]) -> bytes:
    """
    Write uniform records as CSV.

    Columns come from the first record's keys, titled via humanize_key.
    Keys missing from later records are left empty; extra keys are ignored.

    Returns:
        UTF-8 CSV bytes, or b"No data available" for an empty list
    """
    if not records:
        return EMPTY_CSV_PLACEHOLDER

    fieldnames = list(records[0].keys())

    output = io.StringIO()
    writer = csv.DictWriter(
        output,
        fieldnames=fieldnames,
        restval="",
        extrasaction="ignore",
        lineterminator="\n",
    )
    writer.writerow({key: humanize_key(key) for key in fieldnames})
    for record in records:
        writer.writerow({key: _csv_cell(value) for key, value in record.items()})

    logger.debug(f"CSV export: {len(records)} rows, {len(fieldnames)} columns")
    return output.getvalue().encode("utf-8")


def generate_json_export(data: Union[ReportData, Dict[str, Any], List[Any]], options: ExportOptions) -> bytes:
    """
    Wrap data in the metadata envelope and serialize with 2-space indentation.

    Returns:
        UTF-8 JSON bytes shaped {"metadata": {...}, "data": ...}
    """
    payload = data.model_dump(exclude_none=True) if isinstance(data, ReportData) else data

    export_data = {
        "metadata": create_export_metadata(options),
        "data": payload,
    }
    return json.dumps(export_data, indent=2, default=str).encode("utf-8")


def _filename_part(value: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", value)


def build_export_filename(options: ExportOptions) -> str:
    """{template}-report-{start}-{end}-{reportType}.{ext}, header-safe."""
    parts = (options.template, options.date_range.start, options.date_range.end, options.report_type)
    template, start, end, report_type = (_filename_part(part) for part in parts)
    return f"{template}-report-{start}-{end}-{report_type}.{options.format}"


async def export_report(
    data: Optional[ReportData],
    options: ExportOptions,
    records: Optional[List[Dict[str, Any]]] = None,
    browser_renderer: Optional[BrowserPdfRenderer] = None
) -> ExportResult:
    """
    Render report data in the format named by options.format.

    Args:
        data: Report bundle (pdf and json; unused for csv)
        options: Export options
        records: Flat record list (csv)
        browser_renderer: When given, PDFs are printed from HTML by a headless browser

    Returns:
        ExportResult with bytes, media type and download filename
    """
    logger.info(f"Exporting {options.report_type} report as {options.format} for user {options.user_id}")

    if options.format == "pdf":
        if browser_renderer is not None:
            content = await browser_renderer.render(generate_html_template(data, options))
        else:
            content = generate_pdf_report(data, options)
    elif options.format == "csv":
        if records is None:
            raise ValueError("CSV export requires a flat list of records")
        content = generate_csv_export(records)
    elif options.format == "json":
        content = generate_json_export(data, options)
    else:
        raise ValueError(f"Unsupported export format: {options.format}")

    return ExportResult(
        content=content,
        media_type=MEDIA_TYPES[options.format],
        filename=build_export_filename(options),
    )
