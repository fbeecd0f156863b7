"""Single entry point turning a resolved project list into a downloadable file."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Sequence

from uxrmetrics.db.models import ProjectModel, utcnow
from uxrmetrics.reporting.csv_export import render_csv
from uxrmetrics.reporting.html_export import render_html
from uxrmetrics.reporting.pdf_export import render_pdf
from uxrmetrics.reporting.records import (
    ExportFormat,
    ExportOptions,
    build_export_record,
    format_timestamp,
)

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv; charset=utf-8",
    ExportFormat.JSON: "application/json",
    ExportFormat.HTML: "text/html; charset=utf-8",
    ExportFormat.PDF: "application/pdf",
}


@dataclass
class ExportResult:
    content: bytes
    media_type: str
    filename: str

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


def export_filename(fmt: ExportFormat, generated_at: datetime) -> str:
    return f"uxr-projects-{generated_at.date().isoformat()}.{fmt.extension}"


def _json_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, Decimal):
        return float(value)
    return value


def render_json(records: Sequence[dict[str, Any]]) -> str:
    payload = [{key: _json_value(value) for key, value in record.items()} for record in records]
    return json.dumps(payload, indent=2)


def export_projects(
    projects: Sequence[ProjectModel],
    options: ExportOptions,
    generated_at: datetime | None = None,
) -> ExportResult:
    """Render ``projects`` (already filtered and ordered) in ``options.format``."""
    generated_at = generated_at or utcnow()
    fmt = options.format

    if fmt is ExportFormat.CSV:
        records = [build_export_record(p, options) for p in projects]
        content = render_csv(records, options).encode("utf-8")
    elif fmt is ExportFormat.JSON:
        records = [build_export_record(p, options) for p in projects]
        content = render_json(records).encode("utf-8")
    elif fmt is ExportFormat.HTML:
        content = render_html(projects, options, generated_at).encode("utf-8")
    else:
        content = render_pdf(projects, options, generated_at)

    logger.info("Exported %d projects as %s (%d bytes)", len(projects), fmt.value, len(content))
    return ExportResult(
        content=content,
        media_type=MEDIA_TYPES[fmt],
        filename=export_filename(fmt, generated_at),
    )
