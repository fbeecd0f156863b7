"""Integration tests for project and taxonomy persistence against SQLite."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from uxrmetrics.core.exceptions import ConflictError, NotFoundError
from uxrmetrics.db.models import (
    CategoryModel,
    ProjectFileModel,
    ProjectMetricModel,
    ProjectTagModel,
    TagModel,
)
from uxrmetrics.db.seed import DEFAULT_TAXONOMY, ensure_admin_user, seed_taxonomy
from uxrmetrics.models import ProjectInput, ProjectRead, ProjectSource, ProjectStatus
from uxrmetrics.projects import repository
from uxrmetrics.projects.filters import ProjectFilters

pytestmark = pytest.mark.integration


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


async def _create(session, auth, title, **fields):
    project = await repository.create_project(
        session, ProjectInput(title=title, **fields), auth
    )
    await session.commit()
    return project


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestProjectCrud:
    @pytest.mark.asyncio
    async def test_create_loads_relations(self, db_session, admin_auth, taxonomy):
        tag = taxonomy["Usability Testing"]

        project = await _create(
            db_session,
            admin_auth,
            "Checkout study",
            participant_count=8,
            budget=Decimal("250.00"),
            tag_ids=[tag.id, tag.id],
        )

        read = ProjectRead.model_validate(project)
        assert read.status is ProjectStatus.ACTIVE
        assert read.source is ProjectSource.MANUAL
        assert read.created_by.name == "UXR Admin"
        assert [pt.tag.name for pt in read.tags] == ["Usability Testing"]
        assert read.tags[0].tag.category.name == "Research Type"

    @pytest.mark.asyncio
    async def test_create_with_unknown_tag_fails(self, db_session, admin_auth):
        with pytest.raises(NotFoundError):
            await repository.create_project(
                db_session, ProjectInput(title="x", tag_ids=[uuid4()]), admin_auth
            )

    @pytest.mark.asyncio
    async def test_update_replaces_tag_set(self, db_session, admin_auth, taxonomy):
        project = await _create(
            db_session,
            admin_auth,
            "Diary study",
            tag_ids=[taxonomy["Usability Testing"].id, taxonomy["Web App"].id],
        )

        updated = await repository.update_project(
            db_session,
            project.id,
            ProjectInput(
                title="Diary study v2",
                status=ProjectStatus.COMPLETED,
                tag_ids=[taxonomy["Web App"].id, taxonomy["Mobile App"].id],
            ),
        )
        await db_session.commit()

        assert updated.id == project.id
        assert updated.title == "Diary study v2"
        assert updated.status == "COMPLETED"
        assert sorted(pt.tag.name for pt in updated.tags) == ["Mobile App", "Web App"]
        assert await _count(db_session, ProjectTagModel) == 2

    @pytest.mark.asyncio
    async def test_update_missing_project(self, db_session):
        with pytest.raises(NotFoundError):
            await repository.update_project(db_session, uuid4(), ProjectInput(title="x"))

    @pytest.mark.asyncio
    async def test_delete_removes_owned_rows(self, db_session, admin_auth, taxonomy):
        project = await _create(
            db_session, admin_auth, "To delete", tag_ids=[taxonomy["Web App"].id]
        )
        await repository.replace_metrics(db_session, project.id, {"responses": 3})
        await repository.add_project_file(
            db_session,
            project.id,
            filename="abc.pdf",
            original_name="notes.pdf",
            mime_type="application/pdf",
            size=10,
            url="/uploads/abc.pdf",
        )
        await db_session.commit()

        filenames = await repository.delete_project(db_session, project.id)
        await db_session.commit()

        assert filenames == ["abc.pdf"]
        assert await _count(db_session, ProjectTagModel) == 0
        assert await _count(db_session, ProjectMetricModel) == 0
        assert await _count(db_session, ProjectFileModel) == 0
        # Tags themselves survive
        assert await _count(db_session, TagModel) == 4
        with pytest.raises(NotFoundError):
            await repository.get_project(db_session, project.id)

    @pytest.mark.asyncio
    async def test_delete_missing_project(self, db_session):
        with pytest.raises(NotFoundError):
            await repository.delete_project(db_session, uuid4())

    @pytest.mark.asyncio
    async def test_add_file_to_missing_project(self, db_session):
        with pytest.raises(NotFoundError):
            await repository.add_project_file(
                db_session,
                uuid4(),
                filename="a",
                original_name="a",
                mime_type="text/plain",
                size=1,
                url="/uploads/a",
            )

    @pytest.mark.asyncio
    async def test_replace_metrics_is_wholesale(self, db_session, admin_auth):
        project = await _create(db_session, admin_auth, "Survey")
        await repository.replace_metrics(db_session, project.id, {"a": 1, "b": True})
        await repository.replace_metrics(db_session, project.id, {"c": None})
        await db_session.commit()

        reloaded = await repository.get_project(db_session, project.id)

        assert {m.metric_key: m.value for m in reloaded.metrics} == {"c": ""}

    @pytest.mark.asyncio
    async def test_find_by_external_id(self, db_session, admin_auth):
        project = await _create(
            db_session,
            admin_auth,
            "Imported",
            source=ProjectSource.QUALTRICS,
            external_id="SV_1",
        )

        found = await repository.find_by_external_id(db_session, ProjectSource.QUALTRICS, "SV_1")
        other = await repository.find_by_external_id(
            db_session, ProjectSource.GREAT_QUESTION, "SV_1"
        )

        assert found.id == project.id
        assert other is None


class TestFetchProjects:
    @pytest.mark.asyncio
    async def test_filters_intersect(self, db_session, admin_auth, taxonomy):
        research = taxonomy["Usability Testing"].id
        web = taxonomy["Web App"].id
        mobile = taxonomy["Mobile App"].id
        both = await _create(db_session, admin_auth, "Web usability", tag_ids=[research, web])
        await _create(db_session, admin_auth, "Mobile usability", tag_ids=[research, mobile])
        await _create(db_session, admin_auth, "Web only", tag_ids=[web])

        filters = ProjectFilters(
            tag_ids=[research], category_ids=[taxonomy["Platform"].id, uuid4()]
        )
        by_tag_and_category = await repository.fetch_projects(db_session, filters)
        assert len(by_tag_and_category) == 2

        filters = ProjectFilters(tag_ids=[research], query="web")
        (match,) = await repository.fetch_projects(db_session, filters)
        assert match.id == both.id

    @pytest.mark.asyncio
    async def test_status_filter_scenario(self, db_session, admin_auth):
        await _create(db_session, admin_auth, "Project A", participant_count=10)
        project_b = await _create(
            db_session,
            admin_auth,
            "Project B",
            status=ProjectStatus.COMPLETED,
            source=ProjectSource.QUALTRICS,
            start_date=utc(2024, 1, 1),
            end_date=utc(2024, 1, 5),
        )

        results = await repository.fetch_projects(
            db_session, ProjectFilters(statuses=[ProjectStatus.COMPLETED])
        )

        assert [p.id for p in results] == [project_b.id]

    @pytest.mark.asyncio
    async def test_text_search_matches_description_case_insensitively(
        self, db_session, admin_auth
    ):
        await _create(db_session, admin_auth, "Interviews", description="Pricing PAGE feedback")
        await _create(db_session, admin_auth, "Other")

        results = await repository.fetch_projects(db_session, ProjectFilters(query="pricing page"))

        assert [p.title for p in results] == ["Interviews"]

    @pytest.mark.asyncio
    async def test_project_ids_filter(self, db_session, admin_auth):
        first = await _create(db_session, admin_auth, "First")
        await _create(db_session, admin_auth, "Second")

        results = await repository.fetch_projects(db_session, ProjectFilters(project_ids=[first.id]))

        assert [p.id for p in results] == [first.id]


class TestTaxonomy:
    @pytest.mark.asyncio
    async def test_category_name_conflict(self, db_session, taxonomy):
        with pytest.raises(ConflictError):
            await repository.create_category(db_session, "research type")

    @pytest.mark.asyncio
    async def test_create_tag(self, db_session, taxonomy):
        tag = await repository.create_tag(db_session, "Card Sorting", taxonomy["Research Type"].id)

        assert tag.category.name == "Research Type"

    @pytest.mark.asyncio
    async def test_tag_conflict_and_missing_category(self, db_session, taxonomy):
        with pytest.raises(ConflictError):
            await repository.create_tag(db_session, "web app", taxonomy["Platform"].id)
        with pytest.raises(NotFoundError):
            await repository.create_tag(db_session, "New", uuid4())

    @pytest.mark.asyncio
    async def test_listing_is_ordered_by_name(self, db_session, taxonomy):
        categories = await repository.list_categories(db_session)
        tags = await repository.list_tags(db_session)

        assert [c.name for c in categories] == ["Platform", "Research Type"]
        assert [t.name for t in tags] == [
            "Mobile App",
            "Usability Testing",
            "User Interviews",
            "Web App",
        ]
        assert len(categories[0].tags) == 2


class TestSeed:
    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session):
        expected_tags = sum(len(tags) for _, _, tags in DEFAULT_TAXONOMY.values())

        first = await seed_taxonomy(db_session)
        await db_session.commit()
        second = await seed_taxonomy(db_session)

        assert first == (len(DEFAULT_TAXONOMY), expected_tags)
        assert second == (0, 0)
        assert await _count(db_session, CategoryModel) == len(DEFAULT_TAXONOMY)

    @pytest.mark.asyncio
    async def test_seed_keeps_existing_rows(self, db_session, taxonomy):
        categories, tags = await seed_taxonomy(db_session)

        assert categories == len(DEFAULT_TAXONOMY) - 2
        assert tags == sum(len(t) for _, _, t in DEFAULT_TAXONOMY.values()) - 4

    @pytest.mark.asyncio
    async def test_ensure_admin_user_promotes_existing(self, db_session, admin_user):
        admin_user.role = "VIEWER"
        await db_session.commit()

        user, created = await ensure_admin_user(db_session, "ADMIN@uxr.com", "new-hash")

        assert created is False
        assert user.id == admin_user.id
        assert user.role == "ADMIN"
        assert user.password_hash == "new-hash"
