"""Project CRUD routes.

Routes:
- GET    /api/projects       - Filtered project list (newest update first)
- POST   /api/projects       - Create project
- GET    /api/projects/{id}  - Project detail
- PUT    /api/projects/{id}  - Full update (tag set replaced)
- DELETE /api/projects/{id}  - Hard delete with owned rows and stored files
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.config import UploadConfig
from uxrmetrics.db.connection import get_db
from uxrmetrics.models import AuthContext, ProjectInput, ProjectRead
from uxrmetrics.projects import repository
from uxrmetrics.projects.filters import ProjectFilters
from uxrmetrics.web.auth import require_admin
from uxrmetrics.web.dependencies import get_upload_config

logger = logging.getLogger(__name__)

router = APIRouter(tags=["projects"])


@router.get("/api/projects", response_model=list[ProjectRead])
async def list_projects(
    auth: AuthContext = Depends(require_admin),
    query: str | None = None,
    tags: str | None = None,
    categories: str | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    source: str | None = None,
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
):
    """List projects. List-valued filters are comma-separated."""
    try:
        filters = ProjectFilters.from_params(
            query=query,
            status=status_filter,
            source=source,
            start_date=start_date,
            end_date=end_date,
            tags=tags,
            categories=categories,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid filter: {exc}") from exc

    projects = await repository.fetch_projects(db, filters)
    return [ProjectRead.model_validate(p) for p in projects]


@router.post("/api/projects", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectInput,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    project = await repository.create_project(db, data, auth)
    return ProjectRead.model_validate(project)


@router.get("/api/projects/{project_id}", response_model=ProjectRead)
async def get_project(
    project_id: UUID,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    project = await repository.get_project(db, project_id)
    return ProjectRead.model_validate(project)


@router.put("/api/projects/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: UUID,
    data: ProjectInput,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    project = await repository.update_project(db, project_id, data)
    return ProjectRead.model_validate(project)


@router.delete("/api/projects/{project_id}")
async def delete_project(
    project_id: UUID,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    uploads: UploadConfig = Depends(get_upload_config),
):
    """Delete the project, then remove its stored files (best effort)."""
    filenames = await repository.delete_project(db, project_id)
    await db.commit()

    for filename in filenames:
        path = uploads.directory / filename
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove upload %s: %s", path, exc)

    return {"message": "Project deleted successfully"}
