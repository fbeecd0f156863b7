"""Category and tag routes.

Routes:
- GET  /api/categories - Categories with their tags
- POST /api/categories - Create category
- GET  /api/tags       - Tags with their category
- POST /api/tags       - Create tag in a category
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.db.connection import get_db
from uxrmetrics.models import AuthContext, CategoryWithTags, TagRead
from uxrmetrics.projects import repository
from uxrmetrics.web.auth import require_admin
from uxrmetrics.web.models import CategoryCreate, TagCreate

router = APIRouter(tags=["taxonomy"])


@router.get("/api/categories", response_model=list[CategoryWithTags])
async def list_categories(
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    categories = await repository.list_categories(db)
    return [CategoryWithTags.model_validate(c) for c in categories]


@router.post(
    "/api/categories", response_model=CategoryWithTags, status_code=status.HTTP_201_CREATED
)
async def create_category(
    body: CategoryCreate,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    category = await repository.create_category(
        db, body.name, description=body.description, color=body.color
    )
    return CategoryWithTags.model_validate(category)


@router.get("/api/tags", response_model=list[TagRead])
async def list_tags(
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    tags = await repository.list_tags(db)
    return [TagRead.model_validate(t) for t in tags]


@router.post("/api/tags", response_model=TagRead, status_code=status.HTTP_201_CREATED)
async def create_tag(
    body: TagCreate,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    tag = await repository.create_tag(db, body.name, body.category_id)
    return TagRead.model_validate(tag)
