"""Session authentication for the UXR Metrics API.

Users live in the ``users`` table with bcrypt password hashes. A successful
login stores a session record in Redis (with TTL) keyed by a random token that
is handed to the browser as an http-only cookie. When Redis is unreachable the
sessions are kept in process memory instead.
"""

from __future__ import annotations

import json
import logging
import secrets
from datetime import datetime, timedelta
from uuid import UUID

import bcrypt
import redis
from fastapi import Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.config import get_config
from uxrmetrics.core.exceptions import UnauthorizedError
from uxrmetrics.db.models import UserModel, utcnow
from uxrmetrics.models import AuthContext, UserRole

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"

# In-memory fallback for development when Redis is missing
_memory_sessions: dict[str, dict] = {}

_REDIS_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


def get_redis_client() -> redis.Redis:
    """Get Redis client for session storage."""
    return redis.from_url(
        get_config().auth.redis_url, decode_responses=True, socket_connect_timeout=2
    )


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Malformed hash in the database
        return False


def _expiry_seconds() -> int:
    return get_config().auth.session_expiry_hours * 3600


def create_session(user: UserModel) -> str:
    """Create a session for an authenticated user and return its token."""
    session_token = secrets.token_urlsafe(32)
    now = utcnow()

    session_data = {
        "user_id": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "created_at": now.isoformat(),
        "expires_at": (now + timedelta(seconds=_expiry_seconds())).isoformat(),
    }

    try:
        get_redis_client().setex(
            f"{SESSION_KEY_PREFIX}{session_token}", _expiry_seconds(), json.dumps(session_data)
        )
    except _REDIS_ERRORS:
        logger.warning("Redis unavailable, using in-memory session storage")
        _memory_sessions[session_token] = session_data

    return session_token


def _expired(session_data: dict) -> bool:
    return utcnow() > datetime.fromisoformat(session_data["expires_at"])


def validate_session(session_token: str | None) -> dict | None:
    """Return the session record for ``session_token``, or ``None`` if invalid/expired."""
    if not session_token:
        return None

    try:
        redis_client = get_redis_client()
        raw = redis_client.get(f"{SESSION_KEY_PREFIX}{session_token}")
    except _REDIS_ERRORS:
        session_data = _memory_sessions.get(session_token)
        if session_data is None:
            return None
        if _expired(session_data):
            del _memory_sessions[session_token]
            return None
        return session_data

    if not raw:
        return None

    try:
        session_data = json.loads(raw)
        if _expired(session_data):
            redis_client.delete(f"{SESSION_KEY_PREFIX}{session_token}")
            return None
        return session_data
    except (json.JSONDecodeError, KeyError, ValueError):
        redis_client.delete(f"{SESSION_KEY_PREFIX}{session_token}")
        return None


def logout(session_token: str | None) -> None:
    """Invalidate a session token."""
    if not session_token:
        return
    try:
        get_redis_client().delete(f"{SESSION_KEY_PREFIX}{session_token}")
    except _REDIS_ERRORS:
        logger.warning("Redis unavailable during logout, clearing in-memory session only")
    _memory_sessions.pop(session_token, None)


async def verify_credentials_db(
    session: AsyncSession, email: str, password: str
) -> UserModel | None:
    """Return the user when ``email``/``password`` match, else ``None``."""
    stmt = select(UserModel).where(func.lower(UserModel.email) == email.strip().lower())
    user = (await session.execute(stmt)).scalars().first()
    if user is None or not check_password(password, user.password_hash):
        return None
    return user


def auth_context_from_session(session_data: dict) -> AuthContext:
    return AuthContext(
        user_id=UUID(session_data["user_id"]),
        email=session_data["email"],
        name=session_data["name"],
        role=UserRole(session_data["role"]),
    )


def get_auth_context(request: Request) -> AuthContext | None:
    """Resolve the session cookie into an ``AuthContext`` (``None`` when absent)."""
    session_data = validate_session(request.cookies.get(get_config().auth.cookie_name))
    if not session_data:
        return None
    try:
        return auth_context_from_session(session_data)
    except (KeyError, ValueError):
        return None


def require_admin(request: Request) -> AuthContext:
    """Dependency that admits only ADMIN sessions.

    Raises:
        UnauthorizedError: No valid session, or the role is not ADMIN.
    """
    auth = get_auth_context(request)
    if auth is None or not auth.is_admin:
        raise UnauthorizedError()
    return auth
