"""Export-shaped project records shared by every export format."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from uxrmetrics.db.models import ProjectModel
from uxrmetrics.models import ProjectSource, ProjectStatus
from uxrmetrics.projects.filters import to_utc

METRIC_PREFIX = "metric_"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"
    HTML = "html"
    PDF = "pdf"

    @property
    def extension(self) -> str:
        return self.value


@dataclass(frozen=True)
class ExportOptions:
    """Target format plus the optional sections to include."""

    format: ExportFormat = ExportFormat.CSV
    include_tags: bool = False
    include_metrics: bool = False
    include_files: bool = False


def unique_in_order(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def format_date(value: datetime | None) -> str:
    """``YYYY-MM-DD`` in UTC, empty string when missing."""
    if value is None:
        return ""
    return to_utc(value).date().isoformat()


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return to_utc(value).isoformat()


def build_export_record(project: ProjectModel, options: ExportOptions) -> dict[str, Any]:
    """Flatten a project (with loaded relations) into an export record.

    Values stay native (datetimes, ``Decimal``); each formatter renders them.
    Sections not requested in ``options`` produce no keys at all.
    """
    record: dict[str, Any] = {
        "id": str(project.id) if project.id else None,
        "title": project.title,
        "description": project.description,
        "status": ProjectStatus(project.status).value,
        "source": ProjectSource(project.source).value,
        "participant_count": project.participant_count,
        "budget": project.budget,
        "start_date": project.start_date,
        "end_date": project.end_date,
        "created_by": project.created_by.name if project.created_by else None,
        "created_at": project.created_at,
        "updated_at": project.updated_at,
    }

    if options.include_tags:
        record["tags"] = [pt.tag.name for pt in project.tags]
        record["categories"] = unique_in_order(pt.tag.category.name for pt in project.tags)

    if options.include_metrics:
        for metric in project.metrics:
            record[f"{METRIC_PREFIX}{metric.metric_key}"] = metric.value

    if options.include_files:
        record["file_count"] = len(project.files)
        record["files"] = [
            {
                "filename": f.filename,
                "original_name": f.original_name,
                "mime_type": f.mime_type,
                "size": f.size,
                "url": f.url,
            }
            for f in project.files
        ]

    return record


def metric_items(record: dict[str, Any]) -> list[tuple[str, Any]]:
    """``(key, value)`` pairs for the ``metric_*`` fields, prefix stripped."""
    return [
        (key[len(METRIC_PREFIX):], value)
        for key, value in record.items()
        if key.startswith(METRIC_PREFIX)
    ]


def summarize(projects: Iterable[ProjectModel]) -> dict[str, int]:
    """Headline counts printed at the top of HTML/PDF reports."""
    summary = {"total": 0, "active": 0, "completed": 0, "participants": 0}
    for project in projects:
        summary["total"] += 1
        if project.status == ProjectStatus.ACTIVE.value:
            summary["active"] += 1
        elif project.status == ProjectStatus.COMPLETED.value:
            summary["completed"] += 1
        summary["participants"] += project.participant_count or 0
    return summary


def format_metrics(record: dict[str, Any]) -> str:
    """``key: value; …`` for the record's metric fields."""
    return "; ".join(f"{key}: {value}" for key, value in metric_items(record))


def format_file_names(record: dict[str, Any]) -> str:
    return "; ".join(f["original_name"] for f in record["files"])


REPORT_HEADERS = ["Title", "Status", "Source", "Participants", "Created"]


def report_headers(options: ExportOptions) -> list[str]:
    """Column headings of the HTML/PDF project table for ``options``."""
    headers = list(REPORT_HEADERS)
    if options.include_tags:
        headers.append("Tags")
    if options.include_metrics:
        headers.append("Metrics")
    if options.include_files:
        headers.append("Files")
    return headers


def report_row(record: dict[str, Any], options: ExportOptions) -> list[str]:
    """One HTML/PDF table row as display strings, matching ``report_headers``."""
    row = [
        record["title"],
        record["status"],
        record["source"],
        str(record["participant_count"] or 0),
        format_date(record["created_at"]),
    ]
    if options.include_tags:
        row.append(", ".join(record["tags"]))
    if options.include_metrics:
        row.append(format_metrics(record))
    if options.include_files:
        names = format_file_names(record)
        row.append(f"{record['file_count']} ({names})" if names else str(record["file_count"]))
    return row
