"""
PDF Adapter — direct paginated text layout with reportlab.

Layout (A4, 20 mm margins):
1. Centered bold title
2. Metadata block: report type, date range, generation timestamp
3. Sections in fixed order (overview, usage, performance, cost, risk),
   one "key: value" line block per entry, word-wrapped to the page width
4. Centered italic footer on the last page

A new page starts whenever the next block does not fit above the
bottom limit. Rendering errors propagate to the caller.
"""

import io
from datetime import datetime, timezone
from typing import Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from contract_analytics.core.config import settings
from contract_analytics.core.logging import setup_logger
from contract_analytics.export.export_schema import ExportOptions, ReportData, format_date_range
from contract_analytics.export.formatting import format_value

logger = setup_logger("INFO")

MARGIN = 20 * mm
LINE_HEIGHT = 5 * mm
BLOCK_GAP = 5 * mm
SECTION_GAP = 10 * mm

# Space kept free at the bottom of every page
SECTION_BOTTOM_LIMIT = 60 * mm
LINE_BOTTOM_LIMIT = 40 * mm

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"


class PdfReportWriter:
    """Top-down text cursor over a reportlab canvas."""

    def __init__(self, buffer: io.BytesIO, pagesize=A4, compress: bool = True):
        self.buffer = buffer
        # Uncompressed streams keep drawn text readable in the raw bytes
        self.canvas = canvas.Canvas(buffer, pagesize=pagesize, pageCompression=1 if compress else 0)
        self.width, self.height = pagesize
        self.y = self.height - MARGIN
        self.pages = 1
        self._font = (FONT_REGULAR, 10)
        self.canvas.setFont(*self._font)

    @property
    def text_width(self) -> float:
        return self.width - 2 * MARGIN

    def set_font(self, name: str, size: float):
        self._font = (name, size)
        self.canvas.setFont(name, size)

    def new_page(self):
        self.canvas.showPage()
        self.pages += 1
        self.y = self.height - MARGIN
        # Canvas state resets on showPage
        self.canvas.setFont(*self._font)

    def ensure_space(self, needed: float, bottom_limit: float):
        """Break the page if a block of `needed` height would cross bottom_limit."""
        if self.y - needed < bottom_limit and self.y < self.height - MARGIN:
            self.new_page()

    def centered(self, text: str, advance: float):
        self.canvas.drawCentredString(self.width / 2, self.y, text)
        self.y -= advance

    def line(self, text: str, advance: float):
        self.canvas.drawString(MARGIN, self.y, text)
        self.y -= advance

    def wrapped(self, text: str):
        """Word-wrap a block; lines that still overflow break onto new pages."""
        font_name, font_size = self._font
        lines = simpleSplit(text, font_name, font_size, self.text_width) or [""]

        self.ensure_space(len(lines) * LINE_HEIGHT, LINE_BOTTOM_LIMIT)
        for text_line in lines:
            self.ensure_space(LINE_HEIGHT, LINE_BOTTOM_LIMIT)
            self.line(text_line, LINE_HEIGHT)
        self.y -= BLOCK_GAP

    def footer(self, text: str):
        font = self._font
        self.set_font(FONT_ITALIC, 10)
        self.canvas.drawCentredString(self.width / 2, 10 * mm, text)
        self.set_font(*font)

    def save(self):
        self.canvas.save()


def write_section(writer: PdfReportWriter, title: str, values: dict):
    """Write a section title followed by one wrapped block per entry."""
    writer.ensure_space(0, SECTION_BOTTOM_LIMIT)

    writer.set_font(FONT_BOLD, 16)
    writer.line(title, 15 * mm)

    writer.set_font(FONT_REGULAR, 10)
    for key, value in values.items():
        writer.wrapped(f"{key}: {format_value(value)}")

    writer.y -= SECTION_GAP


def generate_pdf_report(
    data: ReportData,
    options: ExportOptions,
    generated_at: Optional[datetime] = None,
    writer: Optional[PdfReportWriter] = None
) -> bytes:
    """
    Render a report bundle as a PDF document.

    Args:
        data: Report bundle; absent sections are skipped
        options: Export options (report type and date range are printed)
        generated_at: Timestamp printed in the metadata block (defaults to now)
        writer: Pre-built writer over a buffer (for inspection in tests)

    Returns:
        PDF bytes
    """
    generated_at = generated_at or datetime.now(timezone.utc)

    writer = writer or PdfReportWriter(io.BytesIO())

    writer.canvas.setTitle(settings.REPORT_TITLE)

    writer.set_font(FONT_BOLD, 20)
    writer.centered(settings.REPORT_TITLE, 20 * mm)

    writer.set_font(FONT_REGULAR, 12)
    writer.line(f"Report Type: {options.report_type}", 10 * mm)
    writer.line(f"Date Range: {format_date_range(options.date_range)}", 10 * mm)
    writer.line(f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}", 20 * mm)

    for title, values in data.sections():
        write_section(writer, title, values)

    writer.footer(settings.REPORT_FOOTER)
    writer.save()

    pdf_bytes = writer.buffer.getvalue()
    logger.info(
        f"PDF report generated: {writer.pages} page(s), {len(pdf_bytes)} bytes "
        f"(report_type={options.report_type})"
    )
    return pdf_bytes
