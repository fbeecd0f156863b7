"""Qualtrics and Great Question listing/import routes.

Routes:
- GET  /api/qualtrics       - Surveys available on Qualtrics
- POST /api/qualtrics       - Import ``survey_ids`` as projects
- GET  /api/great-question  - Projects available on Great Question
- POST /api/great-question  - Import ``project_ids`` as projects

Listing failures surface as 502; a missing token as 400. Import failures of
individual identifiers are reported in ``failed`` and do not abort the batch.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.db.connection import get_db
from uxrmetrics.integration.sync import (
    ClientFactory,
    import_external_projects,
    list_external_projects,
)
from uxrmetrics.models import ApiService, AuthContext
from uxrmetrics.web.auth import require_admin
from uxrmetrics.web.dependencies import get_client_factory
from uxrmetrics.web.models import (
    ExternalProjectSummary,
    GreatQuestionImportRequest,
    ImportResponse,
    QualtricsImportRequest,
)

router = APIRouter(tags=["integrations"])


async def _list(
    db: AsyncSession, service: ApiService, client_factory: ClientFactory
) -> list[ExternalProjectSummary]:
    projects = await list_external_projects(db, service, client_factory=client_factory)
    return [ExternalProjectSummary(**asdict(p)) for p in projects]


async def _import(
    db: AsyncSession,
    service: ApiService,
    external_ids: list[str],
    auth: AuthContext,
    client_factory: ClientFactory,
) -> ImportResponse:
    result = await import_external_projects(
        db, service, external_ids, auth, client_factory=client_factory
    )
    return ImportResponse(imported=result.imported, failed=result.failed)


@router.get("/api/qualtrics", response_model=list[ExternalProjectSummary])
async def list_qualtrics_surveys(
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    return await _list(db, ApiService.QUALTRICS, client_factory)


@router.post(
    "/api/qualtrics", response_model=ImportResponse, status_code=status.HTTP_201_CREATED
)
async def import_qualtrics_surveys(
    body: QualtricsImportRequest,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    return await _import(db, ApiService.QUALTRICS, body.survey_ids, auth, client_factory)


@router.get("/api/great-question", response_model=list[ExternalProjectSummary])
async def list_great_question_projects(
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    return await _list(db, ApiService.GREAT_QUESTION, client_factory)


@router.post(
    "/api/great-question", response_model=ImportResponse, status_code=status.HTTP_201_CREATED
)
async def import_great_question_projects(
    body: GreatQuestionImportRequest,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    return await _import(db, ApiService.GREAT_QUESTION, body.project_ids, auth, client_factory)
