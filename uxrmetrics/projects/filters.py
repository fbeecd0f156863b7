"""Typed project filter and its translation into SQLAlchemy predicates.

Every supplied criterion narrows the result set (top-level AND). Within the
list-valued criteria membership is OR: a project matches ``tag_ids`` when it
carries at least one of the tags, and ``category_ids`` when at least one of
its tags belongs to one of the categories. When both tag and category
criteria are given they are AND-combined.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Literal
from uuid import UUID

from sqlalchemy import Select, or_, select
from sqlalchemy.orm import selectinload
from sqlalchemy.sql.elements import ColumnElement

from uxrmetrics.db.models import ProjectModel, ProjectTagModel, TagModel
from uxrmetrics.models import ProjectSource, ProjectStatus

ProjectOrder = Literal["updated", "created"]

PROJECT_LOAD_OPTIONS = (
    selectinload(ProjectModel.created_by),
    selectinload(ProjectModel.tags)
    .selectinload(ProjectTagModel.tag)
    .selectinload(TagModel.category),
    selectinload(ProjectModel.files),
    selectinload(ProjectModel.metrics),
)


@dataclass
class ProjectFilters:
    """Optional filter criteria for the project list."""

    query: str | None = None
    statuses: list[ProjectStatus] = field(default_factory=list)
    sources: list[ProjectSource] = field(default_factory=list)
    start_date: datetime | None = None
    end_date: datetime | None = None
    tag_ids: list[UUID] = field(default_factory=list)
    category_ids: list[UUID] = field(default_factory=list)
    project_ids: list[UUID] = field(default_factory=list)

    @classmethod
    def from_params(
        cls,
        query: str | None = None,
        status: str | None = None,
        source: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        tags: str | None = None,
        categories: str | None = None,
        project_ids: str | None = None,
    ) -> ProjectFilters:
        """Build filters from raw query-string values.

        List values are comma-separated; blank entries are ignored. A
        date-only ``end_date`` covers that whole day.

        Raises:
            ValueError: On an unknown enum value, malformed id or date.
        """
        return cls(
            query=query.strip() if query and query.strip() else None,
            statuses=[ProjectStatus(v) for v in split_csv(status)],
            sources=[ProjectSource(v) for v in split_csv(source)],
            start_date=parse_date_param(start_date),
            end_date=parse_date_param(end_date, end_of_day=True),
            tag_ids=[UUID(v) for v in split_csv(tags)],
            category_ids=[UUID(v) for v in split_csv(categories)],
            project_ids=[UUID(v) for v in split_csv(project_ids)],
        )


def split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_date_param(value: str | None, end_of_day: bool = False) -> datetime | None:
    """Parse an ISO date or datetime into an aware UTC datetime."""
    if not value:
        return None
    value = value.strip()
    if len(value) == 10:
        day = date.fromisoformat(value)
        return datetime.combine(day, time.max if end_of_day else time.min, tzinfo=timezone.utc)
    return to_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def to_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def build_predicates(filters: ProjectFilters) -> list[ColumnElement[bool]]:
    """Translate filters into a list of predicates to be AND-ed together."""
    predicates: list[ColumnElement[bool]] = []

    if filters.query:
        pattern = _like_pattern(filters.query)
        predicates.append(
            or_(
                ProjectModel.title.ilike(pattern, escape="\\"),
                ProjectModel.description.ilike(pattern, escape="\\"),
            )
        )

    if filters.statuses:
        predicates.append(ProjectModel.status.in_([s.value for s in filters.statuses]))

    if filters.sources:
        predicates.append(ProjectModel.source.in_([s.value for s in filters.sources]))

    if filters.start_date is not None:
        predicates.append(ProjectModel.created_at >= to_utc(filters.start_date))

    if filters.end_date is not None:
        predicates.append(ProjectModel.created_at <= to_utc(filters.end_date))

    if filters.tag_ids:
        predicates.append(ProjectModel.tags.any(ProjectTagModel.tag_id.in_(filters.tag_ids)))

    if filters.category_ids:
        predicates.append(
            ProjectModel.tags.any(
                ProjectTagModel.tag.has(TagModel.category_id.in_(filters.category_ids))
            )
        )

    if filters.project_ids:
        predicates.append(ProjectModel.id.in_(filters.project_ids))

    return predicates


def build_project_query(
    filters: ProjectFilters | None = None, order: ProjectOrder = "updated"
) -> Select[tuple[ProjectModel]]:
    """Select matching projects with all relations eagerly loaded."""
    stmt = select(ProjectModel).options(*PROJECT_LOAD_OPTIONS)

    predicates = build_predicates(filters) if filters else []
    if predicates:
        stmt = stmt.where(*predicates)

    order_column = ProjectModel.updated_at if order == "updated" else ProjectModel.created_at
    return stmt.order_by(order_column.desc(), ProjectModel.id)
