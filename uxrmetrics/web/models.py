"""Request and response bodies for the UXR Metrics web API.

Domain read models (``ProjectRead`` etc.) live in ``uxrmetrics.models``; this
module only holds the shapes that exist purely for the HTTP surface.

Usage:
    from uxrmetrics.web.models import QualtricsImportRequest

    @router.post("/api/qualtrics")
    async def import_surveys(body: QualtricsImportRequest):
        ...
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from uxrmetrics.models import ProjectRead, UserSummary


class CamelRequest(BaseModel):
    """Request body accepting camelCase keys as well as the field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Authentication
# ============================================================================


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class CurrentUser(UserSummary):
    """Identity returned by ``GET /api/auth/me``."""

    role: str


# ============================================================================
# Taxonomy
# ============================================================================


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    color: str | None = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class TagCreate(CamelRequest):
    name: str = Field(min_length=1, max_length=100)
    category_id: UUID

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


# ============================================================================
# API tokens
# ============================================================================


class TokenUpdate(CamelRequest):
    """Either or both service tokens; omitted/blank values leave a service untouched."""

    qualtrics_token: str | None = None
    great_question_token: str | None = None


# ============================================================================
# Imports
# ============================================================================


def _clean_ids(values: list[str]) -> list[str]:
    cleaned = [v.strip() for v in values if v and v.strip()]
    if not cleaned:
        raise ValueError("at least one identifier is required")
    return cleaned


class QualtricsImportRequest(CamelRequest):
    survey_ids: list[str]

    @field_validator("survey_ids")
    @classmethod
    def non_empty(cls, v: list[str]) -> list[str]:
        return _clean_ids(v)


class GreatQuestionImportRequest(CamelRequest):
    project_ids: list[str]

    @field_validator("project_ids")
    @classmethod
    def non_empty(cls, v: list[str]) -> list[str]:
        return _clean_ids(v)


class ImportResponse(BaseModel):
    """Projects created or updated by an import, plus identifiers that failed."""

    imported: list[ProjectRead]
    failed: list[str] = []


class ExternalProjectSummary(BaseModel):
    external_id: str
    name: str
    description: str | None = None
    created_at: datetime | None = None
    status: str | None = None
    participant_count: int | None = None
