"""Researcher analytics endpoint.

GET /api/v1/analytics - Aggregated KPIs, timeline, heatmap, breakdowns and insights
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_researcher
from app.logging_config import get_logger
from db.session import get_db_session
from services.analytics_models import AnalyticsPayload
from services.analytics_service import get_analytics_payload, resolve_filters
from services.date_buckets import Granularity

logger = get_logger(__name__)
router = APIRouter()


@router.get("/analytics", response_model=AnalyticsPayload)
async def get_analytics(
    start: date | None = Query(None, alias="from", description="Window start (default: Jan 1)"),
    end: date | None = Query(None, alias="to", description="Window end (default: today)"),
    granularity: Granularity = Query(Granularity.MONTH),
    compare: bool = Query(False, description="Include a comparison window"),
    compare_start: date | None = Query(None, alias="compare_from"),
    compare_end: date | None = Query(None, alias="compare_to"),
    researcher_id: str = Depends(get_current_researcher),
    db: AsyncSession = Depends(get_db_session),
) -> AnalyticsPayload:
    """Build the analytics payload for the calling researcher.

    Comparison is returned only when ``compare`` is set and both compare
    bounds are present and ordered.
    """
    filters = resolve_filters(
        start=start,
        end=end,
        granularity=granularity,
        compare=compare,
        compare_start=compare_start,
        compare_end=compare_end,
    )
    return await get_analytics_payload(db, researcher_id, filters)
