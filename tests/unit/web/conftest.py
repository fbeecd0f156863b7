"""Fixtures for route tests: a bare app with every router and a stub session."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from uxrmetrics.db.connection import get_db
from uxrmetrics.web.app import ROUTERS, register_exception_handlers
from uxrmetrics.web.auth import require_admin


@pytest.fixture
def db():
    """Session stand-in; repository calls are patched per test."""
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.execute = AsyncMock()
    return session


@pytest.fixture
def app(db):
    test_app = FastAPI()
    register_exception_handlers(test_app)
    for router in ROUTERS:
        test_app.include_router(router)

    async def override_get_db():
        yield db

    test_app.dependency_overrides[get_db] = override_get_db
    return test_app


@pytest.fixture
def anonymous_client(app):
    """Client without any session cookie."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def client(app, fake_admin):
    """Client whose requests are authenticated as an ADMIN."""
    app.dependency_overrides[require_admin] = lambda: fake_admin
    return TestClient(app, raise_server_exceptions=False)
