"""
Health Check Routes
===================

The cache is a non-essential dependency: with Redis down the platform keeps
serving from the database. /health therefore always answers 200 and reports
the cache as "degraded" rather than failing the probe and getting the
instance pulled from the load balancer.
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from eventcache.application.api.dependencies import CacheDep, SettingsDep

router = APIRouter(prefix="/health", tags=["Health"])


class HealthResponse(BaseModel):
    """
    Standard health check response model.

    status is "ok" whenever the process can answer; cache details live
    under "cache".
    """

    status: str
    timestamp: str
    version: str
    cache: dict[str, Any]


@router.get("", response_model=HealthResponse)
async def health_check(cache: CacheDep, settings: SettingsDep) -> HealthResponse:
    """Liveness plus cache backend status and statistics."""
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app.APP_VERSION,
        cache=await cache.health_check(),
    )
