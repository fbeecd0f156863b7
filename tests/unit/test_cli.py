"""Tests for the uxrmetrics command line interface."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from uxrmetrics.cli import app
from uxrmetrics.config import reset_config

runner = CliRunner()


@pytest.fixture
def cli_db(monkeypatch, tmp_path):
    """File-backed database so each command's event loop sees the same data."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    reset_config()
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output


def test_init_reports_database(cli_db):
    result = runner.invoke(app, ["init", "--drop"])

    assert result.exit_code == 0
    assert "Database initialized" in result.output


def test_seed_is_idempotent(cli_db):
    first = runner.invoke(app, ["seed"])
    second = runner.invoke(app, ["seed"])

    assert first.exit_code == 0
    assert "Seeded 3 categories and 20 tags" in first.output
    assert "Seeded 0 categories and 0 tags" in second.output


def test_create_admin_then_update(cli_db):
    created = runner.invoke(app, ["create-admin", "admin@uxr.com", "--password", "s3cret"])
    updated = runner.invoke(app, ["create-admin", "ADMIN@uxr.com", "--password", "n3w"])

    assert created.exit_code == 0
    assert "Created admin user admin@uxr.com" in created.output
    assert "Updated admin user ADMIN@uxr.com" in updated.output


def test_stats_on_empty_database(cli_db):
    result = runner.invoke(app, ["stats"])

    assert result.exit_code == 0
    assert "Projects by Status" in result.output
    assert "Projects by Source" in result.output
    for value in ("ACTIVE", "CANCELLED", "MANUAL", "GREAT_QUESTION"):
        assert value in result.output
