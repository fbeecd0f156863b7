"""Analytics routes.

Routes:
- GET /api/analytics?timeRange=3months|6months|12months|all
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.db.connection import get_db
from uxrmetrics.models import AuthContext
from uxrmetrics.reporting.analytics import AnalyticsEngine, TimeRange
from uxrmetrics.web.auth import require_admin

router = APIRouter(tags=["analytics"])


@router.get("/api/analytics")
async def get_analytics(
    auth: AuthContext = Depends(require_admin),
    time_range: str = Query(default=TimeRange.SIX_MONTHS.value, alias="timeRange"),
    db: AsyncSession = Depends(get_db),
):
    """Dashboard series for the selected window (default six months)."""
    try:
        selected = TimeRange(time_range)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid timeRange") from None

    return await AnalyticsEngine(db).compute(selected)
