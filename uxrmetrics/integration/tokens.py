"""Storage of external-service API tokens."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.db.models import ApiTokenModel
from uxrmetrics.models import ApiService, ApiTokenRead

logger = logging.getLogger(__name__)


def redact_token(token: str | None) -> str:
    """Keep only the last four characters of a secret."""
    return f"***{token[-4:]}" if token else ""


async def get_active_token(session: AsyncSession, service: ApiService) -> str | None:
    """Return the active token for ``service``, or ``None`` when not configured."""
    stmt = (
        select(ApiTokenModel.token)
        .where(ApiTokenModel.service == service.value, ApiTokenModel.is_active.is_(True))
        .limit(1)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def list_tokens(session: AsyncSession) -> list[ApiTokenRead]:
    """All token rows ordered by service, with secrets redacted."""
    rows = (
        await session.execute(select(ApiTokenModel).order_by(ApiTokenModel.service))
    ).scalars().all()
    return [
        ApiTokenRead(
            id=row.id,
            service=ApiService(row.service),
            token=redact_token(row.token),
            is_active=row.is_active,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
        for row in rows
    ]


async def upsert_token(session: AsyncSession, service: ApiService, token: str) -> ApiTokenModel:
    """Store ``token`` as the active credential for ``service``."""
    existing = (
        await session.execute(select(ApiTokenModel).where(ApiTokenModel.service == service.value))
    ).scalar_one_or_none()

    if existing:
        existing.token = token
        existing.is_active = True
        record = existing
    else:
        record = ApiTokenModel(service=service.value, token=token, is_active=True)
        session.add(record)

    await session.flush()
    logger.info("Stored API token for %s (%s)", service.value, redact_token(token))
    return record
