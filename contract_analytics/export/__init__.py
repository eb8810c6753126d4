"""
Export Package

Report bundle assembly and rendering to PDF, CSV and JSON.
"""

from contract_analytics.export.export_schema import (
    DateRange,
    ReportData,
    ExportOptions,
    create_export_metadata,
)

from contract_analytics.export.pdf_adapter import generate_pdf_report

from contract_analytics.export.browser_pdf import (
    BrowserPdfRenderer,
    generate_html_template,
)

from contract_analytics.export.service import (
    ExportResult,
    generate_csv_export,
    generate_json_export,
    export_report,
)

from contract_analytics.export.report_data import (
    fetch_report_data,
    fetch_analysis_rows,
    build_analysis_rows,
)

__all__ = [
    "DateRange",
    "ReportData",
    "ExportOptions",
    "create_export_metadata",
    "generate_pdf_report",
    "BrowserPdfRenderer",
    "generate_html_template",
    "ExportResult",
    "generate_csv_export",
    "generate_json_export",
    "export_report",
    "fetch_report_data",
    "fetch_analysis_rows",
    "build_analysis_rows",
]
