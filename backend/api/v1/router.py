"""API v1 router aggregation.

Combines all v1 route modules into a single router.
"""

from __future__ import annotations

from fastapi import APIRouter

from api.v1.routes.activities import router as activities_router
from api.v1.routes.analytics import router as analytics_router

api_v1_router = APIRouter()

api_v1_router.include_router(activities_router, tags=["Activities"])
api_v1_router.include_router(analytics_router, tags=["Analytics"])
