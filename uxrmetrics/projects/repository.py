"""Database queries and writes for projects and the tag taxonomy."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from uxrmetrics.core.exceptions import ConflictError, NotFoundError
from uxrmetrics.db.models import (
    CategoryModel,
    ProjectFileModel,
    ProjectMetricModel,
    ProjectModel,
    ProjectTagModel,
    TagModel,
)
from uxrmetrics.models import AuthContext, ProjectInput, ProjectSource
from uxrmetrics.projects.filters import (
    PROJECT_LOAD_OPTIONS,
    ProjectFilters,
    ProjectOrder,
    build_project_query,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Projects
# ============================================================================


async def fetch_projects(
    session: AsyncSession,
    filters: ProjectFilters | None = None,
    order: ProjectOrder = "updated",
) -> list[ProjectModel]:
    """Return all projects matching ``filters`` with relations loaded."""
    result = await session.execute(build_project_query(filters, order=order))
    return list(result.scalars().unique().all())


async def get_project(session: AsyncSession, project_id: UUID) -> ProjectModel:
    """Load one project with relations, refreshing any stale identity-map copy.

    Raises:
        NotFoundError: If no project has this id.
    """
    stmt = (
        select(ProjectModel)
        .options(*PROJECT_LOAD_OPTIONS)
        .where(ProjectModel.id == project_id)
        .execution_options(populate_existing=True)
    )
    project = (await session.execute(stmt)).scalar_one_or_none()
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


async def find_by_external_id(
    session: AsyncSession, source: ProjectSource, external_id: str
) -> ProjectModel | None:
    """Find the local copy of an imported project by its natural key."""
    stmt = (
        select(ProjectModel)
        .where(
            ProjectModel.source == source.value,
            ProjectModel.external_id == external_id,
        )
        .order_by(ProjectModel.created_at)
        .limit(1)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def _ensure_tags_exist(session: AsyncSession, tag_ids: Sequence[UUID]) -> list[UUID]:
    unique_ids = list(dict.fromkeys(tag_ids))
    if not unique_ids:
        return []
    found = set(
        (await session.execute(select(TagModel.id).where(TagModel.id.in_(unique_ids))))
        .scalars()
        .all()
    )
    missing = [tag_id for tag_id in unique_ids if tag_id not in found]
    if missing:
        raise NotFoundError("Tag", missing[0])
    return unique_ids


def _apply_fields(project: ProjectModel, data: ProjectInput) -> None:
    project.title = data.title
    project.description = data.description
    project.status = data.status.value
    project.source = data.source.value
    project.external_id = data.external_id
    project.start_date = data.start_date
    project.end_date = data.end_date
    project.participant_count = data.participant_count
    project.budget = data.budget


async def create_project(
    session: AsyncSession, data: ProjectInput, auth: AuthContext
) -> ProjectModel:
    """Create a project owned by the authenticated user."""
    tag_ids = await _ensure_tags_exist(session, data.tag_ids)

    project = ProjectModel(created_by_id=auth.user_id)
    _apply_fields(project, data)
    session.add(project)
    await session.flush()

    session.add_all(ProjectTagModel(project_id=project.id, tag_id=tag_id) for tag_id in tag_ids)
    await session.flush()

    logger.info("Created project %s (%s)", project.id, project.title)
    return await get_project(session, project.id)


async def update_project(
    session: AsyncSession, project_id: UUID, data: ProjectInput
) -> ProjectModel:
    """Overwrite all editable fields and replace the full tag set."""
    project = await get_project(session, project_id)
    tag_ids = await _ensure_tags_exist(session, data.tag_ids)

    _apply_fields(project, data)
    # Orphans must be deleted before re-inserting: (project_id, tag_id) is unique
    project.tags.clear()
    await session.flush()
    project.tags.extend(ProjectTagModel(tag_id=tag_id) for tag_id in tag_ids)
    await session.flush()

    return await get_project(session, project_id)


async def delete_project(session: AsyncSession, project_id: UUID) -> list[str]:
    """Hard-delete a project and every row it owns.

    Returns:
        Stored filenames of the project's uploads, so the caller can remove
        them from disk once the transaction has committed.
    """
    exists = (
        await session.execute(select(ProjectModel.id).where(ProjectModel.id == project_id))
    ).scalar_one_or_none()
    if exists is None:
        raise NotFoundError("Project", project_id)

    filenames = list(
        (
            await session.execute(
                select(ProjectFileModel.filename).where(ProjectFileModel.project_id == project_id)
            )
        )
        .scalars()
        .all()
    )

    for child in (ProjectTagModel, ProjectFileModel, ProjectMetricModel):
        await session.execute(
            delete(child)
            .where(child.project_id == project_id)
            .execution_options(synchronize_session=False)
        )
    await session.execute(
        delete(ProjectModel)
        .where(ProjectModel.id == project_id)
        .execution_options(synchronize_session=False)
    )
    await session.flush()

    logger.info("Deleted project %s (%d files)", project_id, len(filenames))
    return filenames


async def replace_metrics(
    session: AsyncSession, project_id: UUID, metrics: Mapping[str, Any]
) -> None:
    """Delete every metric of the project and insert ``metrics`` (stringified)."""
    await session.execute(
        delete(ProjectMetricModel)
        .where(ProjectMetricModel.project_id == project_id)
        .execution_options(synchronize_session=False)
    )
    session.add_all(
        ProjectMetricModel(project_id=project_id, metric_key=str(key), value=stringify_metric(value))
        for key, value in metrics.items()
    )
    await session.flush()


def stringify_metric(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


async def add_project_file(
    session: AsyncSession,
    project_id: UUID,
    *,
    filename: str,
    original_name: str,
    mime_type: str,
    size: int,
    url: str,
) -> ProjectFileModel:
    """Persist metadata of an uploaded file."""
    exists = (
        await session.execute(select(ProjectModel.id).where(ProjectModel.id == project_id))
    ).scalar_one_or_none()
    if exists is None:
        raise NotFoundError("Project", project_id)

    record = ProjectFileModel(
        project_id=project_id,
        filename=filename,
        original_name=original_name,
        mime_type=mime_type,
        size=size,
        url=url,
    )
    session.add(record)
    await session.flush()
    await session.refresh(record)
    return record


# ============================================================================
# Taxonomy
# ============================================================================


async def list_categories(session: AsyncSession) -> list[CategoryModel]:
    stmt = (
        select(CategoryModel)
        .options(selectinload(CategoryModel.tags))
        .order_by(CategoryModel.name)
    )
    return list((await session.execute(stmt)).scalars().all())


async def create_category(
    session: AsyncSession,
    name: str,
    description: str | None = None,
    color: str | None = None,
) -> CategoryModel:
    """Create a category; names are unique (case-insensitive)."""
    clash = await session.execute(
        select(CategoryModel.id).where(func.lower(CategoryModel.name) == name.lower())
    )
    if clash.scalar_one_or_none() is not None:
        raise ConflictError(f"Category '{name}' already exists")

    category = CategoryModel(name=name, description=description, color=color)
    session.add(category)
    await session.flush()

    stmt = (
        select(CategoryModel)
        .options(selectinload(CategoryModel.tags))
        .where(CategoryModel.id == category.id)
    )
    return (await session.execute(stmt)).scalar_one()


async def list_tags(session: AsyncSession) -> list[TagModel]:
    stmt = select(TagModel).options(selectinload(TagModel.category)).order_by(TagModel.name)
    return list((await session.execute(stmt)).scalars().all())


async def create_tag(session: AsyncSession, name: str, category_id: UUID) -> TagModel:
    """Create a tag inside an existing category.

    A tag's category is fixed at creation; there is no operation that moves it.
    """
    category = await session.get(CategoryModel, category_id)
    if category is None:
        raise NotFoundError("Category", category_id)

    clash = await session.execute(
        select(TagModel.id).where(func.lower(TagModel.name) == name.lower())
    )
    if clash.scalar_one_or_none() is not None:
        raise ConflictError(f"Tag '{name}' already exists")

    tag = TagModel(name=name, category_id=category_id)
    session.add(tag)
    await session.flush()

    stmt = select(TagModel).options(selectinload(TagModel.category)).where(TagModel.id == tag.id)
    return (await session.execute(stmt)).scalar_one()
