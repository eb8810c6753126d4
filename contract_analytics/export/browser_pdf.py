"""
Browser PDF — HTML report printed to PDF through headless Chromium.

generate_html_template() lays the report bundle out as metric cards;
BrowserPdfRenderer prints that HTML with Playwright. The HTML is an
intermediate artifact and is never returned to end users.

The browser is launched per render and closed unconditionally, so a
failed render never leaks a Chromium process. Launch and render errors
propagate to the caller.
"""

import html
from datetime import datetime, timezone
from typing import Callable, List, Optional

from playwright.async_api import async_playwright

from contract_analytics.core.config import settings
from contract_analytics.core.logging import setup_logger
from contract_analytics.export.export_schema import ExportOptions, ReportData, format_date_range
from contract_analytics.export.formatting import format_currency, format_value, humanize_key, is_currency_key

logger = setup_logger("INFO")

PDF_MARGIN = {"top": "20mm", "right": "20mm", "bottom": "20mm", "left": "20mm"}

REPORT_STYLES = """
        body { font-family: Arial, sans-serif; margin: 40px; }
        .header { text-align: center; margin-bottom: 30px; }
        .section { margin-bottom: 25px; }
        .section h2 { color: #2563eb; border-bottom: 2px solid #2563eb; padding-bottom: 5px; }
        .metric { display: inline-block; margin: 10px 20px 10px 0; }
        .metric-value { font-size: 24px; font-weight: bold; color: #1f2937; }
        .metric-label { font-size: 12px; color: #6b7280; }
        .footer { margin-top: 40px; text-align: center; color: #6b7280; font-size: 12px; }
"""


def _metric_card(key: str, value) -> str:
    display = format_currency(value) if is_currency_key(key) and isinstance(value, (int, float)) else format_value(value)
    return (
        '<div class="metric">'
        f'<div class="metric-value">{html.escape(display)}</div>'
        f'<div class="metric-label">{html.escape(humanize_key(key))}</div>'
        '</div>'
    )


def generate_html_template(
    data: ReportData,
    options: ExportOptions,
    generated_at: Optional[datetime] = None
) -> str:
    """
    Build the styled HTML document for browser printing.

    Args:
        data: Report bundle; absent sections are skipped
        options: Export options (report type and date range go in the header)
        generated_at: Timestamp shown in the header (defaults to now)

    Returns:
        Complete HTML document
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    title = html.escape(settings.REPORT_TITLE)

    sections = []
    for section_title, values in data.sections():
        cards = "\n".join(_metric_card(key, value) for key, value in values.items())
        sections.append(
            f'<div class="section">\n<h2>{html.escape(section_title)}</h2>\n{cards}\n</div>'
        )

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>{title}</title>
    <style>{REPORT_STYLES}    </style>
</head>
<body>
    <div class="header">
        <h1>{title}</h1>
        <p>Report Type: {html.escape(options.report_type)} | Date Range: {html.escape(format_date_range(options.date_range))}</p>
        <p>Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}</p>
    </div>
{chr(10).join(sections)}
    <div class="footer">
        <p>{html.escape(settings.REPORT_FOOTER)}</p>
    </div>
</body>
</html>
"""


class BrowserPdfRenderer:
    """
    Prints HTML to A4 PDF with a headless Chromium.

    Constructed explicitly and injected where needed; the playwright
    factory is swappable for tests.
    """

    def __init__(
        self,
        launch_args: Optional[List[str]] = None,
        timeout_ms: Optional[int] = None,
        playwright_factory: Callable = async_playwright
    ):
        self.launch_args = launch_args if launch_args is not None else settings.BROWSER_LAUNCH_ARGS
        self.timeout_ms = timeout_ms or settings.BROWSER_TIMEOUT_MS
        self._playwright_factory = playwright_factory

    async def render(self, html_content: str) -> bytes:
        """
        Print an HTML document to PDF.

        Returns:
            PDF bytes
        """
        async with self._playwright_factory() as playwright:
            browser = await playwright.chromium.launch(headless=True, args=self.launch_args)
            try:
                page = await browser.new_page()
                await page.set_content(html_content, wait_until="networkidle", timeout=self.timeout_ms)
                pdf_bytes = await page.pdf(
                    format="A4",
                    print_background=True,
                    margin=PDF_MARGIN,
                )
            finally:
                await browser.close()

        logger.info(f"Browser PDF rendered: {len(pdf_bytes)} bytes")
        return pdf_bytes
