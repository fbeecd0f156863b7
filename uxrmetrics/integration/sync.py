"""Import/sync of external research projects into local project records.

Each external identifier is reconciled independently and committed as its own
unit: the project upsert and the wholesale metric replacement land together or
not at all. A failing identifier is rolled back, logged and skipped; the rest
of the batch carries on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.config import get_config
from uxrmetrics.core.exceptions import ConfigurationError
from uxrmetrics.db.models import ProjectModel
from uxrmetrics.integration import create_client
from uxrmetrics.integration.base import ExternalProject, ResearchPlatformClient
from uxrmetrics.integration.tokens import get_active_token
from uxrmetrics.models import ApiService, AuthContext, ProjectRead, ProjectStatus
from uxrmetrics.projects.repository import find_by_external_id, get_project, replace_metrics

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ApiService, str], ResearchPlatformClient]


@dataclass
class ImportResult:
    """Outcome of an import batch."""

    imported: list[ProjectRead] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def default_client_factory(service: ApiService, token: str) -> ResearchPlatformClient:
    return create_client(service, token, get_config().integrations)


async def _require_token(session: AsyncSession, service: ApiService) -> str:
    token = await get_active_token(session, service)
    if not token:
        raise ConfigurationError(f"{service.display_name} API token not configured")
    return token


async def list_external_projects(
    session: AsyncSession,
    service: ApiService,
    client_factory: ClientFactory | None = None,
) -> list[ExternalProject]:
    """List the projects available for import on ``service``.

    Raises:
        ConfigurationError: No active token for the service.
        ExternalServiceError: The platform could not be reached or rejected the token.
    """
    token = await _require_token(session, service)
    factory = client_factory or default_client_factory
    async with factory(service, token) as client:
        return await client.list_projects()


async def _reconcile_one(
    session: AsyncSession,
    client: ResearchPlatformClient,
    service: ApiService,
    external_id: str,
    auth: AuthContext,
) -> ProjectModel:
    detail = await client.get_project(external_id)
    metrics = await client.get_metrics(external_id)
    participant_count = await client.get_participant_count(external_id)

    project = await find_by_external_id(session, service.source, external_id)
    if project is not None:
        project.title = detail.name
        if detail.description is not None:
            project.description = detail.description
        project.participant_count = participant_count
        await session.flush()
        logger.info("Updated %s project %s from %s", service.value, project.id, external_id)
    else:
        project = ProjectModel(
            title=detail.name,
            description=detail.description,
            status=ProjectStatus.ACTIVE.value,
            source=service.source.value,
            external_id=external_id,
            participant_count=participant_count,
            start_date=detail.created_at,
            created_by_id=auth.user_id,
        )
        session.add(project)
        await session.flush()
        logger.info("Created %s project %s from %s", service.value, project.id, external_id)

    await replace_metrics(session, project.id, metrics)
    return await get_project(session, project.id)


async def import_external_projects(
    session: AsyncSession,
    service: ApiService,
    external_ids: Sequence[str],
    auth: AuthContext,
    client_factory: ClientFactory | None = None,
) -> ImportResult:
    """Create or update local projects for ``external_ids`` on ``service``.

    Raises:
        ConfigurationError: No active token for the service (nothing fetched).
    """
    token = await _require_token(session, service)
    factory = client_factory or default_client_factory
    result = ImportResult()

    async with factory(service, token) as client:
        for external_id in dict.fromkeys(external_ids):
            try:
                project = await _reconcile_one(session, client, service, external_id, auth)
                await session.commit()
            except Exception:
                await session.rollback()
                logger.exception("Failed to import %s project %s", service.value, external_id)
                result.failed.append(external_id)
                continue
            result.imported.append(ProjectRead.model_validate(project))

    logger.info(
        "%s import finished: %d imported, %d failed",
        service.value,
        len(result.imported),
        len(result.failed),
    )
    return result
