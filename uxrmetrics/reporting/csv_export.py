"""CSV export of project records.

Dialect: Python ``csv`` writer with ``QUOTE_MINIMAL`` (a field is quoted only
when it contains a comma, quote or line break; inner quotes are doubled), ``\\n``
line terminator, header row first. Dates render as ``YYYY-MM-DD`` and missing
values as empty cells.
"""

from __future__ import annotations

import csv
from io import StringIO
from typing import Any, Sequence

from uxrmetrics.reporting.records import (
    ExportOptions,
    format_date,
    format_file_names,
    format_metrics,
)

BASE_HEADERS = [
    "ID",
    "Title",
    "Description",
    "Status",
    "Source",
    "Participant Count",
    "Budget",
    "Start Date",
    "End Date",
    "Created By",
    "Created At",
    "Updated At",
]


def build_headers(options: ExportOptions) -> list[str]:
    headers = list(BASE_HEADERS)
    if options.include_tags:
        headers += ["Tags", "Categories"]
    if options.include_metrics:
        headers.append("Metrics")
    if options.include_files:
        headers += ["Files Count", "Files"]
    return headers


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def build_row(record: dict[str, Any], options: ExportOptions) -> list[str]:
    row = [
        _cell(record["id"]),
        _cell(record["title"]),
        _cell(record["description"]),
        record["status"],
        record["source"],
        _cell(record["participant_count"]),
        _cell(record["budget"]),
        format_date(record["start_date"]),
        format_date(record["end_date"]),
        _cell(record["created_by"]),
        format_date(record["created_at"]),
        format_date(record["updated_at"]),
    ]

    if options.include_tags:
        row.append("; ".join(record["tags"]))
        row.append("; ".join(record["categories"]))

    if options.include_metrics:
        row.append(format_metrics(record))

    if options.include_files:
        row.append(str(record["file_count"]))
        row.append(format_file_names(record))

    return row


def render_csv(records: Sequence[dict[str, Any]], options: ExportOptions) -> str:
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(build_headers(options))
    for record in records:
        writer.writerow(build_row(record, options))
    return output.getvalue()
