"""Shared API dependencies.

Resolves the calling researcher and the activity type as injectable
FastAPI dependencies.
"""

from __future__ import annotations

from typing import Optional

import redis.asyncio as aioredis
import structlog
from fastapi import Depends, Header, Path

from app.dependencies import get_redis
from gateway.session import SessionManager
from services.activity_registry import ActivityDescriptor, get_descriptor


async def get_current_researcher(
    x_session_id: Optional[str] = Header(None),
    redis: aioredis.Redis = Depends(get_redis),
) -> str:
    """Researcher id for the request's ``X-Session-ID`` header.

    Raises UnauthorizedError when the header is missing or the session
    is unknown or expired.
    """
    researcher_id = await SessionManager(redis).resolve_researcher(x_session_id)
    structlog.contextvars.bind_contextvars(researcher_id=researcher_id)
    return researcher_id


def get_activity_descriptor(
    activity_type: str = Path(..., description="Activity type slug, e.g. 'assignments'"),
) -> ActivityDescriptor:
    return get_descriptor(activity_type)
