"""PDF project report using ReportLab.

Same content as the HTML report: title, generation timestamp, summary counts
and one table row per project.
"""

from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch, mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from uxrmetrics.db.models import ProjectModel
from uxrmetrics.reporting.records import (
    ExportOptions,
    build_export_record,
    report_headers,
    report_row,
    summarize,
)

# Styles
styles = getSampleStyleSheet()
title_style = ParagraphStyle(
    "ReportTitle",
    parent=styles["Heading1"],
    fontSize=22,
    spaceAfter=12,
    textColor=colors.HexColor("#2d3748"),
)
subtitle_style = ParagraphStyle(
    "ReportSubtitle",
    parent=styles["Heading2"],
    fontSize=14,
    spaceAfter=10,
    textColor=colors.HexColor("#4a5568"),
)
normal_style = ParagraphStyle(
    "ReportNormal",
    parent=styles["Normal"],
    fontSize=9,
    leading=12,
    textColor=colors.HexColor("#2d3748"),
)

HEADER_STYLE = [
    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#edf2f7")),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTSIZE", (0, 0), (-1, -1), 9),
    ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ("GRID", (0, 0), (-1, -1), 1, colors.HexColor("#e2e8f0")),
    ("PADDING", (0, 0), (-1, -1), 6),
]

COLUMN_WIDTHS = {
    "Title": 3.2 * inch,
    "Status": 1.1 * inch,
    "Source": 1.3 * inch,
    "Participants": 1.0 * inch,
    "Created": 1.0 * inch,
    "Tags": 2.4 * inch,
    "Metrics": 2.4 * inch,
    "Files": 2.0 * inch,
}


def _cell(value: object) -> Paragraph:
    return Paragraph(escape("" if value is None else str(value)), normal_style)


def render_pdf(
    projects: Sequence[ProjectModel], options: ExportOptions, generated_at: datetime
) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=15 * mm,
        leftMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title="UXR Projects Report",
    )

    story = []
    story.append(Paragraph("UXR Projects Report", title_style))
    story.append(
        Paragraph(f"Generated on {generated_at.strftime('%Y-%m-%d %H:%M')} UTC", normal_style)
    )
    story.append(Spacer(1, 0.25 * inch))

    # --- Summary ---
    summary = summarize(projects)
    story.append(Paragraph("Summary", subtitle_style))
    summary_table = Table(
        [
            ["Metric", "Value"],
            ["Total Projects", str(summary["total"])],
            ["Active Projects", str(summary["active"])],
            ["Completed Projects", str(summary["completed"])],
            ["Total Participants", str(summary["participants"])],
        ],
        colWidths=[2.5 * inch, 1.5 * inch],
        hAlign="LEFT",
    )
    summary_table.setStyle(TableStyle(HEADER_STYLE))
    story.append(summary_table)
    story.append(Spacer(1, 0.3 * inch))

    # --- Projects ---
    story.append(Paragraph("Projects", subtitle_style))
    headers = report_headers(options)
    col_widths = [COLUMN_WIDTHS[header] for header in headers]
    scale = min(1.0, doc.width / sum(col_widths))
    col_widths = [width * scale for width in col_widths]

    rows: list[list] = [headers]
    for project in projects:
        record = build_export_record(project, options)
        rows.append([_cell(value) for value in report_row(record, options)])

    projects_table = Table(rows, colWidths=col_widths, repeatRows=1, hAlign="LEFT")
    projects_table.setStyle(TableStyle(HEADER_STYLE))
    story.append(projects_table)

    doc.build(story)
    return buffer.getvalue()
