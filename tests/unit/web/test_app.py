"""Tests for the application factory, error handlers and health route."""

from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from uxrmetrics.web.app import create_app


def test_unhandled_error_is_generic_500(client):
    with patch(
        "uxrmetrics.projects.repository.fetch_projects", side_effect=RuntimeError("boom")
    ):
        response = client.get("/api/projects")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_health_ok(anonymous_client, db):
    response = anonymous_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "connected"}
    db.execute.assert_awaited_once()


def test_health_database_down(anonymous_client, db):
    db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("unreachable"))

    response = anonymous_client.get("/health")

    assert response.status_code == 503
    assert response.json() == {"status": "error", "database": "disconnected"}


def test_create_app_wires_routes_and_request_ids():
    app = create_app()
    paths = set(app.openapi()["paths"])

    assert {"/api/projects", "/api/export", "/api/analytics", "/health"} <= paths

    client = TestClient(app)
    response = client.get("/api/projects")

    assert response.status_code == 401
    assert response.headers["X-Request-ID"]
    assert client.get("/metrics").status_code == 200
