"""Tests for password hashing, sessions and the admin guard."""

from __future__ import annotations

import json
from datetime import timedelta
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
import redis
from starlette.requests import Request

from uxrmetrics.core.exceptions import UnauthorizedError
from uxrmetrics.db.models import UserModel, utcnow
from uxrmetrics.web import auth


def _user(role: str = "ADMIN") -> UserModel:
    return UserModel(
        id=uuid4(), email="admin@uxr.com", name="UXR Admin", password_hash="x", role=role
    )


def _request(token: str | None) -> Request:
    headers = [(b"cookie", f"session={token}".encode())] if token else []
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


@pytest.fixture
def redis_down():
    """Every Redis call fails as if the server were unreachable."""
    client = MagicMock()
    client.setex.side_effect = redis.exceptions.ConnectionError("down")
    client.get.side_effect = redis.exceptions.ConnectionError("down")
    client.delete.side_effect = redis.exceptions.ConnectionError("down")
    with patch("uxrmetrics.web.auth.get_redis_client", return_value=client):
        yield client


class TestPasswords:
    def test_hash_and_check(self):
        hashed = auth.hash_password("s3cret")

        assert hashed != "s3cret"
        assert auth.check_password("s3cret", hashed)
        assert not auth.check_password("wrong", hashed)

    def test_malformed_hash_does_not_raise(self):
        assert auth.check_password("s3cret", "not-a-bcrypt-hash") is False


class TestMemorySessions:
    def test_session_round_trip_without_redis(self, redis_down):
        user = _user()

        token = auth.create_session(user)
        session_data = auth.validate_session(token)

        assert token in auth._memory_sessions
        assert session_data["user_id"] == str(user.id)
        assert session_data["role"] == "ADMIN"
        assert session_data["email"] == "admin@uxr.com"

    def test_unknown_and_missing_tokens(self, redis_down):
        assert auth.validate_session("nope") is None
        assert auth.validate_session(None) is None

    def test_expired_session_is_dropped(self, redis_down):
        token = auth.create_session(_user())
        auth._memory_sessions[token]["expires_at"] = (utcnow() - timedelta(seconds=1)).isoformat()

        assert auth.validate_session(token) is None
        assert token not in auth._memory_sessions

    def test_logout_clears_memory_session(self, redis_down):
        token = auth.create_session(_user())

        auth.logout(token)

        assert auth.validate_session(token) is None


class TestRedisSessions:
    def test_session_stored_with_ttl(self):
        client = MagicMock()
        with patch("uxrmetrics.web.auth.get_redis_client", return_value=client):
            token = auth.create_session(_user())

        key, ttl, payload = client.setex.call_args.args
        assert key == f"session:{token}"
        assert ttl == 24 * 3600
        assert json.loads(payload)["name"] == "UXR Admin"
        assert token not in auth._memory_sessions

    def test_corrupt_record_is_deleted(self):
        client = MagicMock()
        client.get.return_value = "{not json"
        with patch("uxrmetrics.web.auth.get_redis_client", return_value=client):
            assert auth.validate_session("tok") is None

        client.delete.assert_called_once_with("session:tok")


class TestRequireAdmin:
    def test_admin_session_admitted(self, redis_down):
        user = _user()
        token = auth.create_session(user)

        context = auth.require_admin(_request(token))

        assert context.user_id == user.id
        assert context.is_admin

    def test_no_cookie_rejected(self, redis_down):
        with pytest.raises(UnauthorizedError):
            auth.require_admin(_request(None))

    def test_viewer_role_rejected(self, redis_down):
        token = auth.create_session(_user(role="VIEWER"))

        with pytest.raises(UnauthorizedError):
            auth.require_admin(_request(token))


class TestVerifyCredentials:
    @pytest.mark.asyncio
    async def test_email_is_case_insensitive(self, db_session):
        user = UserModel(
            email="admin@uxr.com",
            name="UXR Admin",
            password_hash=auth.hash_password("s3cret"),
            role="ADMIN",
        )
        db_session.add(user)
        await db_session.commit()

        found = await auth.verify_credentials_db(db_session, " Admin@UXR.com ", "s3cret")
        assert found is not None
        assert found.id == user.id

        assert await auth.verify_credentials_db(db_session, "admin@uxr.com", "nope") is None
        assert await auth.verify_credentials_db(db_session, "other@uxr.com", "s3cret") is None
