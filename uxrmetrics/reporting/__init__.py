"""Project exports (CSV, JSON, HTML, PDF) and dashboard analytics."""

from uxrmetrics.reporting.analytics import AnalyticsEngine, TimeRange, summarize_projects
from uxrmetrics.reporting.export import ExportResult, export_projects
from uxrmetrics.reporting.records import ExportFormat, ExportOptions, build_export_record

__all__ = [
    "AnalyticsEngine",
    "ExportFormat",
    "ExportOptions",
    "ExportResult",
    "TimeRange",
    "build_export_record",
    "export_projects",
    "summarize_projects",
]
