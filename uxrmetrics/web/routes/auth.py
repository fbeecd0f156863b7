"""Authentication routes.

Routes:
- POST /api/auth/login  - Verify credentials and set the session cookie
- POST /api/auth/logout - Invalidate the session and clear the cookie
- GET  /api/auth/me     - Identity of the current session
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.config import get_config
from uxrmetrics.core.exceptions import UnauthorizedError
from uxrmetrics.db.connection import get_db
from uxrmetrics.web.auth import create_session, get_auth_context, verify_credentials_db
from uxrmetrics.web.auth import logout as auth_logout
from uxrmetrics.web.models import CurrentUser, LoginRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])


@router.post("/api/auth/login", response_model=CurrentUser)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Log in with email and password; sets an http-only session cookie."""
    user = await verify_credentials_db(db, body.email, body.password)
    if user is None:
        logger.info("Failed login attempt for %s", body.email)
        raise UnauthorizedError("Invalid email or password")

    auth_config = get_config().auth
    response.set_cookie(
        key=auth_config.cookie_name,
        value=create_session(user),
        httponly=True,
        max_age=auth_config.session_expiry_hours * 3600,
        samesite="lax",
        secure=auth_config.cookie_secure,
    )
    logger.info("User %s logged in", user.email)
    return CurrentUser(id=user.id, name=user.name, email=user.email, role=user.role)


@router.post("/api/auth/logout")
async def logout(request: Request, response: Response):
    cookie_name = get_config().auth.cookie_name
    auth_logout(request.cookies.get(cookie_name))
    response.delete_cookie(cookie_name)
    return {"message": "Logged out"}


@router.get("/api/auth/me", response_model=CurrentUser)
async def me(request: Request):
    auth = get_auth_context(request)
    if auth is None:
        raise UnauthorizedError()
    return CurrentUser(id=auth.user_id, name=auth.name, email=auth.email, role=auth.role.value)
