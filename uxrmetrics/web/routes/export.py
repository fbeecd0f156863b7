"""Project export download route.

Routes:
- GET /api/export - Download selected projects as CSV, JSON, HTML or PDF
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.db.connection import get_db
from uxrmetrics.models import AuthContext
from uxrmetrics.projects.filters import ProjectFilters
from uxrmetrics.projects.repository import fetch_projects
from uxrmetrics.reporting import ExportFormat, ExportOptions, export_projects
from uxrmetrics.web.auth import require_admin

router = APIRouter(tags=["export"])


@router.get("/api/export")
async def export(
    auth: AuthContext = Depends(require_admin),
    format: str = Query(default="csv"),
    include_metrics: bool = Query(default=False, alias="includeMetrics"),
    include_files: bool = Query(default=False, alias="includeFiles"),
    include_tags: bool = Query(default=False, alias="includeTags"),
    project_ids: str | None = Query(default=None, alias="projectIds"),
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
):
    """Export projects (newest first) restricted by id list and creation date."""
    try:
        export_format = ExportFormat(format.lower())
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid format") from None

    try:
        filters = ProjectFilters.from_params(
            project_ids=project_ids, start_date=start_date, end_date=end_date
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid filter: {exc}") from exc

    projects = await fetch_projects(db, filters, order="created")
    result = export_projects(
        projects,
        ExportOptions(
            format=export_format,
            include_tags=include_tags,
            include_metrics=include_metrics,
            include_files=include_files,
        ),
    )

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": result.content_disposition},
    )
