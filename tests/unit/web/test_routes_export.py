"""Tests for uxrmetrics.web.routes.export and uxrmetrics.web.routes.analytics."""

from __future__ import annotations

import csv
import re
from io import StringIO
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from uxrmetrics.reporting.analytics import TimeRange

DISPOSITION = re.compile(r'^attachment; filename="uxr-projects-\d{4}-\d{2}-\d{2}\.(\w+)"$')


@pytest.fixture
def mock_fetch():
    with patch("uxrmetrics.web.routes.export.fetch_projects", new_callable=AsyncMock) as mock:
        yield mock


class TestExport:
    def test_csv_is_default(self, client, mock_fetch, project_factory):
        mock_fetch.return_value = [project_factory("Diary study")]

        response = client.get("/api/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert DISPOSITION.match(response.headers["content-disposition"]).group(1) == "csv"
        rows = list(csv.reader(StringIO(response.text)))
        assert rows[1][1] == "Diary study"
        assert mock_fetch.call_args.kwargs["order"] == "created"

    @pytest.mark.parametrize(
        "fmt,media_type",
        [
            ("json", "application/json"),
            ("html", "text/html"),
            ("pdf", "application/pdf"),
            ("PDF", "application/pdf"),
        ],
    )
    def test_formats(self, client, mock_fetch, project_factory, fmt, media_type):
        mock_fetch.return_value = [project_factory()]

        response = client.get("/api/export", params={"format": fmt})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(media_type)
        assert DISPOSITION.match(response.headers["content-disposition"]).group(1) == fmt.lower()

    def test_include_flags_and_selection(self, client, mock_fetch, project_factory):
        project = project_factory(tags=[("Web App", "Platform")])
        mock_fetch.return_value = [project]

        response = client.get(
            "/api/export",
            params={
                "format": "json",
                "includeTags": "true",
                "projectIds": str(project.id),
                "endDate": "2024-12-31",
            },
        )

        (record,) = response.json()
        assert record["tags"] == ["Web App"]
        assert "file_count" not in record
        filters = mock_fetch.call_args.args[1]
        assert filters.project_ids == [project.id]
        assert filters.end_date.isoformat().startswith("2024-12-31T23:59:59")

    def test_without_tags_has_no_tag_fields(self, client, mock_fetch, project_factory):
        mock_fetch.return_value = [project_factory(tags=[("Web App", "Platform")])]

        response = client.get("/api/export", params={"format": "json", "includeTags": "false"})

        (record,) = response.json()
        assert "tags" not in record
        assert "categories" not in record

    def test_invalid_format(self, client, mock_fetch):
        response = client.get("/api/export", params={"format": "xlsx"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid format"}
        mock_fetch.assert_not_called()

    def test_invalid_project_id(self, client, mock_fetch):
        response = client.get("/api/export", params={"projectIds": f"{uuid4()},nope"})

        assert response.status_code == 400


class TestAnalytics:
    @patch("uxrmetrics.web.routes.analytics.AnalyticsEngine")
    def test_defaults_to_six_months(self, mock_engine, client):
        mock_engine.return_value.compute = AsyncMock(return_value={"time_range": "6months"})

        response = client.get("/api/analytics")

        assert response.status_code == 200
        assert response.json() == {"time_range": "6months"}
        mock_engine.return_value.compute.assert_awaited_once_with(TimeRange.SIX_MONTHS)

    @patch("uxrmetrics.web.routes.analytics.AnalyticsEngine")
    def test_explicit_range(self, mock_engine, client):
        mock_engine.return_value.compute = AsyncMock(return_value={})

        client.get("/api/analytics", params={"timeRange": "all"})

        mock_engine.return_value.compute.assert_awaited_once_with(TimeRange.ALL)

    def test_invalid_range(self, client):
        response = client.get("/api/analytics", params={"timeRange": "2years"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid timeRange"}
