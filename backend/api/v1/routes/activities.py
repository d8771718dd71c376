"""Activity record endpoints.

POST   /api/v1/activities/{type}            - Create a record
GET    /api/v1/activities/{type}            - List records (search and filters)
GET    /api/v1/activities/{type}/stats      - Per-type KPI counts
GET    /api/v1/activities/{type}/{id}       - Fetch one record
PATCH  /api/v1/activities/{type}/{id}       - Partial update
DELETE /api/v1/activities/{type}/{id}       - Delete
GET    /api/v1/activities/counts            - Record count per type

Every route is scoped to the researcher resolved from ``X-Session-ID``.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_activity_descriptor, get_current_researcher
from app.logging_config import get_logger
from db.session import get_db_session
from services.activity_registry import ActivityDescriptor
from services.activity_service import ActivityService, activity_counts, parse_filters

logger = get_logger(__name__)
router = APIRouter()


class CreatedResponse(BaseModel):
    id: str


class ListResponse(BaseModel):
    items: list[dict[str, Any]]


class StatsResponse(BaseModel):
    total: int
    last_12_months: int
    by: dict[str, dict[str, int]]
    by_year: dict[str, int]


@router.get("/activities/counts", response_model=dict[str, int])
async def get_activity_counts(
    researcher_id: str = Depends(get_current_researcher),
    db: AsyncSession = Depends(get_db_session),
) -> dict[str, int]:
    """Number of records per activity type."""
    return await activity_counts(db, researcher_id)


@router.post(
    "/activities/{activity_type}",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_activity(
    payload: dict[str, Any] = Body(...),
    descriptor: ActivityDescriptor = Depends(get_activity_descriptor),
    researcher_id: str = Depends(get_current_researcher),
    db: AsyncSession = Depends(get_db_session),
) -> CreatedResponse:
    record_id = await ActivityService(db, descriptor).create(researcher_id, payload)
    return CreatedResponse(id=record_id)


@router.get("/activities/{activity_type}", response_model=ListResponse)
async def list_activities(
    request: Request,
    descriptor: ActivityDescriptor = Depends(get_activity_descriptor),
    researcher_id: str = Depends(get_current_researcher),
    db: AsyncSession = Depends(get_db_session),
) -> ListResponse:
    """List the researcher's records, newest first.

    Accepts ``search``, ``year``, ``month`` (where supported) and the type's
    own filters as query parameters; ``ALL`` or an empty value means no filter.
    """
    filters = parse_filters(descriptor, request.query_params)
    items = await ActivityService(db, descriptor).list(researcher_id, filters)
    return ListResponse(items=items)


@router.get("/activities/{activity_type}/stats", response_model=StatsResponse)
async def get_activity_stats(
    descriptor: ActivityDescriptor = Depends(get_activity_descriptor),
    researcher_id: str = Depends(get_current_researcher),
    db: AsyncSession = Depends(get_db_session),
) -> StatsResponse:
    stats = await ActivityService(db, descriptor).stats(researcher_id)
    return StatsResponse(**stats)


@router.get("/activities/{activity_type}/{record_id}")
async def get_activity(
    record_id: str,
    descriptor: ActivityDescriptor = Depends(get_activity_descriptor),
    researcher_id: str = Depends(get_current_researcher),
    db: AsyncSession = Depends(get_db_session),
) -> dict[str, Any]:
    return await ActivityService(db, descriptor).get(researcher_id, record_id)


@router.patch("/activities/{activity_type}/{record_id}")
async def update_activity(
    record_id: str,
    payload: dict[str, Any] = Body(...),
    descriptor: ActivityDescriptor = Depends(get_activity_descriptor),
    researcher_id: str = Depends(get_current_researcher),
    db: AsyncSession = Depends(get_db_session),
) -> dict[str, Any]:
    await ActivityService(db, descriptor).update(researcher_id, record_id, payload)
    return {}


@router.delete("/activities/{activity_type}/{record_id}")
async def delete_activity(
    record_id: str,
    descriptor: ActivityDescriptor = Depends(get_activity_descriptor),
    researcher_id: str = Depends(get_current_researcher),
    db: AsyncSession = Depends(get_db_session),
) -> dict[str, Any]:
    await ActivityService(db, descriptor).delete(researcher_id, record_id)
    return {}
