"""SQLAlchemy async database models for UXR Metrics.

A project exclusively owns its tag links, uploaded files and metrics; the
relationships below carry ``delete-orphan`` and the foreign keys cascade, and
the repository deletes the children explicitly before the parent row.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from uxrmetrics.models import ProjectSource, ProjectStatus, UserRole


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )


class UserModel(TimestampMixin, Base):
    """Dashboard user. Owns the projects it created."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(
        String(16), nullable=False, default=UserRole.VIEWER.value
    )

    projects: Mapped[list[ProjectModel]] = relationship(back_populates="created_by")


class CategoryModel(TimestampMixin, Base):
    """Named grouping of tags with a display color."""

    __tablename__ = "categories"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text)
    color: Mapped[str | None] = mapped_column(String(32))

    tags: Mapped[list[TagModel]] = relationship(
        back_populates="category", order_by="TagModel.name"
    )


class TagModel(TimestampMixin, Base):
    """Label belonging to exactly one category."""

    __tablename__ = "tags"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    category_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    category: Mapped[CategoryModel] = relationship(back_populates="tags")


class ProjectModel(TimestampMixin, Base):
    """A tracked UX research study."""

    __tablename__ = "projects"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ProjectStatus.ACTIVE.value
    )
    source: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ProjectSource.MANUAL.value
    )
    # Set for imported projects; (source, external_id) is the import dedup key
    external_id: Mapped[str | None] = mapped_column(Text)

    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    participant_count: Mapped[int | None] = mapped_column(Integer)
    budget: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    created_by_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )

    created_by: Mapped[UserModel] = relationship(back_populates="projects")
    tags: Mapped[list[ProjectTagModel]] = relationship(
        back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )
    files: Mapped[list[ProjectFileModel]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProjectFileModel.uploaded_at",
    )
    metrics: Mapped[list[ProjectMetricModel]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProjectMetricModel.metric_key",
    )

    __table_args__ = (
        Index("idx_projects_source_external", "source", "external_id"),
        Index("idx_projects_status", "status"),
        Index("idx_projects_created_at", "created_at"),
        Index("idx_projects_updated_at", "updated_at"),
    )


class ProjectTagModel(Base):
    """Join row between a project and a tag."""

    __tablename__ = "project_tags"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    project_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tag_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    project: Mapped[ProjectModel] = relationship(back_populates="tags")
    tag: Mapped[TagModel] = relationship()

    __table_args__ = (UniqueConstraint("project_id", "tag_id", name="uq_project_tag"),)


class ProjectFileModel(Base):
    """Metadata of a file uploaded against a project."""

    __tablename__ = "project_files"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    project_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    filename: Mapped[str] = mapped_column(Text, nullable=False)  # generated, on disk
    original_name: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[str] = mapped_column(Text, nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    project: Mapped[ProjectModel] = relationship(back_populates="files")


class ProjectMetricModel(Base):
    """Key/value metric scoped to a project. Replaced wholesale on re-sync."""

    __tablename__ = "project_metrics"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    project_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    metric_key: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    project: Mapped[ProjectModel] = relationship(back_populates="metrics")


class ApiTokenModel(TimestampMixin, Base):
    """Bearer credential for one external service (upserted by service)."""

    __tablename__ = "api_tokens"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    service: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    token: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
