"""HTML project report rendered with Jinja2."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from uxrmetrics.db.models import ProjectModel
from uxrmetrics.reporting.records import (
    ExportOptions,
    build_export_record,
    report_headers,
    report_row,
    summarize,
)

TEMPLATES_DIR = Path(__file__).parent / "templates"

_env: Environment | None = None


def get_environment() -> Environment:
    global _env
    if _env is None:
        _env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html"]),
        )
    return _env


def render_html(
    projects: Sequence[ProjectModel], options: ExportOptions, generated_at: datetime
) -> str:
    template = get_environment().get_template("report.html")
    return template.render(
        title="UXR Projects Report",
        generated_at=generated_at,
        summary=summarize(projects),
        headers=report_headers(options),
        rows=[report_row(build_export_record(p, options), options) for p in projects],
    )
