"""
Request-scoped collaborators, overridable through app.dependency_overrides.
"""
from contract_analytics.core.db import AnalyticsRepository, get_session
from contract_analytics.export.browser_pdf import BrowserPdfRenderer


def get_analytics_repository() -> AnalyticsRepository:
    return AnalyticsRepository(session_scope=get_session)


def get_browser_renderer() -> BrowserPdfRenderer:
    return BrowserPdfRenderer()
