"""External-service API token routes.

Routes:
- GET  /api/tokens - Stored tokens, secrets redacted to the last 4 characters
- POST /api/tokens - Upsert the Qualtrics and/or Great Question token
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.db.connection import get_db
from uxrmetrics.integration import tokens
from uxrmetrics.models import ApiService, ApiTokenRead, AuthContext
from uxrmetrics.web.auth import require_admin
from uxrmetrics.web.models import TokenUpdate

router = APIRouter(tags=["tokens"])


@router.get("/api/tokens", response_model=list[ApiTokenRead])
async def list_tokens(
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await tokens.list_tokens(db)


@router.post("/api/tokens", response_model=list[ApiTokenRead])
async def update_tokens(
    body: TokenUpdate,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Store the supplied tokens; blank values leave that service unchanged."""
    supplied = {
        ApiService.QUALTRICS: body.qualtrics_token,
        ApiService.GREAT_QUESTION: body.great_question_token,
    }
    for service, value in supplied.items():
        if value and value.strip():
            await tokens.upsert_token(db, service, value.strip())

    return await tokens.list_tokens(db)
