"""
Admin Routes
============

Operational endpoints for the cache layer:

1. Statistics: hit/miss counters and in-flight fetches
2. Invalidation: drop one key or a glob pattern after an out-of-band write
3. Flush: empty the whole cache namespace
4. Metrics: Prometheus text exposition

SECURITY:
---------
Every route here sits behind require_admin (X-Admin-Token header). Flushing
the cache makes every following read hit the database, so these endpoints
must never be reachable anonymously.
"""

from fastapi import APIRouter, Depends, Response

from eventcache.application.api.dependencies import CacheDep, require_admin
from eventcache.application.api.models.admin import (
    CacheStatsResponse,
    FlushResponse,
    InvalidateRequest,
    InvalidateResponse,
)
from eventcache.core.logging.logger import get_logger
from eventcache.infrastructure.monitoring.metrics_collector import get_metrics_collector

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


# ============================================================================
# CACHE ENDPOINTS
# ============================================================================


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def get_cache_stats(cache: CacheDep) -> CacheStatsResponse:
    """Current cache statistics (cumulative, never reset by reading)."""
    return CacheStatsResponse(**cache.get_stats().to_dict())


@router.post("/cache/flush", response_model=FlushResponse)
async def flush_cache(cache: CacheDep) -> FlushResponse:
    """Empty the cache. Subsequent reads repopulate it from the origin."""
    await cache.flush_all()
    logger.warning("Cache flushed via admin API")
    return FlushResponse()


@router.post("/cache/invalidate", response_model=InvalidateResponse)
async def invalidate_cache(body: InvalidateRequest, cache: CacheDep) -> InvalidateResponse:
    """
    Invalidate one key or every key matching a pattern.

    Example:
        POST /admin/cache/invalidate
        {"pattern": "leaderboard:*"}
    """
    if body.key is not None:
        await cache.invalidate(body.key)
        logger.info("Cache key invalidated via admin API", cache_key=body.key)
        return InvalidateResponse(key=body.key)

    deleted = await cache.delete_pattern(body.pattern)
    logger.info("Cache pattern invalidated via admin API", pattern=body.pattern, deleted=deleted)
    return InvalidateResponse(pattern=body.pattern, deleted=deleted)


# ============================================================================
# METRICS
# ============================================================================


@router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    metrics = get_metrics_collector()
    return Response(content=metrics.get_prometheus_metrics(), media_type=metrics.get_content_type())
