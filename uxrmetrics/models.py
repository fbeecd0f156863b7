"""UXR Metrics Pydantic models and enumerations.

Enums are shared by the ORM layer and the API; the ``*Read`` models serialize
ORM rows (``from_attributes``) into the JSON shapes returned by the web API.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class UserRole(str, Enum):
    """Dashboard roles. Only ADMIN may use the API."""

    ADMIN = "ADMIN"
    VIEWER = "VIEWER"


class ProjectStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    PAUSED = "PAUSED"
    CANCELLED = "CANCELLED"


class ProjectSource(str, Enum):
    """Origin of a project record."""

    MANUAL = "MANUAL"
    QUALTRICS = "QUALTRICS"
    GREAT_QUESTION = "GREAT_QUESTION"


class ApiService(str, Enum):
    """External research platforms that hold an API token."""

    QUALTRICS = "QUALTRICS"
    GREAT_QUESTION = "GREAT_QUESTION"

    @property
    def source(self) -> ProjectSource:
        return ProjectSource(self.value)

    @property
    def display_name(self) -> str:
        return "Qualtrics" if self is ApiService.QUALTRICS else "Great Question"


class AuthContext(BaseModel):
    """Authenticated caller, resolved once per request and passed explicitly."""

    model_config = ConfigDict(frozen=True)

    user_id: UUID
    email: str
    name: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


class ProjectInput(BaseModel):
    """Create/update payload for a project (full replacement of tags)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(min_length=1)
    description: str | None = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    source: ProjectSource = ProjectSource.MANUAL
    external_id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    participant_count: int | None = Field(default=None, ge=0)
    budget: Decimal | None = Field(default=None, ge=0)
    tag_ids: list[UUID] = []

    @field_validator(
        "description", "external_id", "start_date", "end_date", "participant_count", "budget",
        mode="before",
    )
    @classmethod
    def empty_string_to_none(cls, v):
        if v == "":
            return None
        return v

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v


class _ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class UserSummary(_ORMModel):
    id: UUID
    name: str
    email: str


class CategoryRead(_ORMModel):
    id: UUID
    name: str
    description: str | None = None
    color: str | None = None
    created_at: datetime
    updated_at: datetime


class TagRead(_ORMModel):
    id: UUID
    name: str
    category_id: UUID
    category: CategoryRead
    created_at: datetime
    updated_at: datetime


class TagSummary(_ORMModel):
    id: UUID
    name: str
    category_id: UUID


class CategoryWithTags(CategoryRead):
    tags: list[TagSummary] = []


class ProjectTagRead(_ORMModel):
    id: UUID
    tag_id: UUID
    tag: TagRead


class ProjectFileRead(_ORMModel):
    id: UUID
    project_id: UUID
    filename: str
    original_name: str
    mime_type: str
    size: int
    url: str
    uploaded_at: datetime


class ProjectMetricRead(_ORMModel):
    id: UUID
    metric_key: str
    value: str
    created_at: datetime


class ProjectRead(_ORMModel):
    """Project with all relations, as returned by list/detail/import routes."""

    id: UUID
    title: str
    description: str | None = None
    status: ProjectStatus
    source: ProjectSource
    external_id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    participant_count: int | None = None
    budget: Decimal | None = None
    created_by_id: UUID
    created_by: UserSummary
    created_at: datetime
    updated_at: datetime
    tags: list[ProjectTagRead] = []
    files: list[ProjectFileRead] = []
    metrics: list[ProjectMetricRead] = []


class ApiTokenRead(BaseModel):
    """Token row with the secret redacted to its last four characters."""

    id: UUID
    service: ApiService
    token: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
