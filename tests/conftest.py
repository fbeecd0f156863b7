"""Pytest configuration and fixtures for UXR Metrics tests.

Provides the environment, an in-memory database session and small builders
for projects and the tag taxonomy.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from uxrmetrics.config import reset_config
from uxrmetrics.db.connection import enable_sqlite_foreign_keys
from uxrmetrics.db.models import (
    Base,
    CategoryModel,
    ProjectFileModel,
    ProjectMetricModel,
    ProjectModel,
    ProjectTagModel,
    TagModel,
    UserModel,
)
from uxrmetrics.models import AuthContext, UserRole
from uxrmetrics.web import auth as web_auth


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch, tmp_path):
    """Set up test environment variables."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.delenv("SESSION_COOKIE_SECURE", raising=False)
    reset_config()
    web_auth._memory_sessions.clear()
    yield
    reset_config()


@pytest_asyncio.fixture()
async def db_session() -> AsyncSession:
    """Create in-memory database for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest_asyncio.fixture()
async def admin_user(db_session: AsyncSession) -> UserModel:
    user = UserModel(
        email="admin@uxr.com",
        name="UXR Admin",
        password_hash="not-a-real-hash",
        role=UserRole.ADMIN.value,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
def admin_auth(admin_user: UserModel) -> AuthContext:
    return AuthContext(
        user_id=admin_user.id,
        email=admin_user.email,
        name=admin_user.name,
        role=UserRole.ADMIN,
    )


@pytest.fixture
def fake_admin() -> AuthContext:
    """Admin identity for route tests that never touch the database."""
    return AuthContext(user_id=uuid4(), email="admin@uxr.com", name="UXR Admin", role=UserRole.ADMIN)


@pytest_asyncio.fixture()
async def taxonomy(db_session: AsyncSession) -> dict[str, object]:
    """Two categories with two tags each, keyed by name."""
    research = CategoryModel(name="Research Type", color="#3B82F6")
    platform = CategoryModel(name="Platform", color="#10B981")
    db_session.add_all([research, platform])
    await db_session.flush()

    tags = {
        "Usability Testing": TagModel(name="Usability Testing", category_id=research.id),
        "User Interviews": TagModel(name="User Interviews", category_id=research.id),
        "Web App": TagModel(name="Web App", category_id=platform.id),
        "Mobile App": TagModel(name="Mobile App", category_id=platform.id),
    }
    db_session.add_all(tags.values())
    await db_session.commit()
    return {"Research Type": research, "Platform": platform, **tags}


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_project(
    title: str = "Checkout usability study",
    *,
    status: str = "ACTIVE",
    source: str = "MANUAL",
    created_at: datetime | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    participant_count: int | None = None,
    budget: str | None = None,
    tags: list[tuple[str, str]] | None = None,
    metrics: dict[str, str] | None = None,
    files: list[str] | None = None,
    description: str | None = None,
) -> ProjectModel:
    """Build a transient project with relations for formatter/aggregator tests.

    ``tags`` is a list of ``(tag name, category name)`` pairs.
    """
    created_at = created_at or utc(2024, 1, 1)
    stamps = {"created_at": created_at, "updated_at": created_at}
    categories: dict[str, CategoryModel] = {}
    owner = UserModel(
        id=uuid4(), name="UXR Admin", email="admin@uxr.com", password_hash="x", **stamps
    )
    project = ProjectModel(
        id=uuid4(),
        title=title,
        description=description,
        status=status,
        source=source,
        start_date=start_date,
        end_date=end_date,
        participant_count=participant_count,
        budget=Decimal(budget) if budget is not None else None,
        created_by_id=owner.id,
        created_by=owner,
        **stamps,
    )
    for tag_name, category_name in tags or []:
        if category_name not in categories:
            categories[category_name] = CategoryModel(id=uuid4(), name=category_name, **stamps)
        category = categories[category_name]
        tag = TagModel(id=uuid4(), name=tag_name, category_id=category.id, category=category, **stamps)
        project.tags.append(ProjectTagModel(id=uuid4(), tag_id=tag.id, tag=tag))
    for key, value in (metrics or {}).items():
        project.metrics.append(
            ProjectMetricModel(id=uuid4(), metric_key=key, value=value, created_at=created_at)
        )
    for name in files or []:
        filename = f"{uuid4()}.pdf"
        project.files.append(
            ProjectFileModel(
                id=uuid4(),
                project_id=project.id,
                filename=filename,
                original_name=name,
                mime_type="application/pdf",
                size=1024,
                url=f"/uploads/{filename}",
                uploaded_at=created_at,
            )
        )
    return project


@pytest.fixture
def project_factory():
    """The ``make_project`` builder, for tests outside this module."""
    return make_project
