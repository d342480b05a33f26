"""
FastAPI Dependency Providers
============================

Route handlers never construct the cache themselves. The composition root
(app.py lifespan) builds exactly one CacheCoordinator and stores it on
``app.state``; the providers below hand it to handlers.

Example:
    @router.get("/events/{event_id}")
    async def get_event(event_id: int, cache: CacheDep):
        return await cache.get(
            CacheKeys.event(event_id),
            lambda: storage.get_event(event_id),
            CacheTTL.EVENT,
        )
"""

import secrets
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from eventcache.core.config.settings import Settings, get_settings
from eventcache.core.logging.logger import get_logger
from eventcache.infrastructure.cache.coordinator import CacheCoordinator

logger = get_logger(__name__)


# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with (falls back to the process settings)."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_cache(request: Request) -> CacheCoordinator:
    """
    Retrieve the CacheCoordinator created during startup.

    Raises:
        HTTPException(503): If the lifespan has not run
    """
    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Cache not initialized"
        )
    return cache


async def require_admin(
    settings: Annotated[Settings, Depends(get_app_settings)],
    x_admin_token: Annotated[str | None, Header()] = None,
) -> None:
    """
    Guard for administrative routes.

    Compares the X-Admin-Token header with ADMIN_TOKEN. With no ADMIN_TOKEN
    configured the admin API is closed: every call is rejected.

    Raises:
        HTTPException(403): Admin API disabled, header missing or token wrong
    """
    expected = settings.app.ADMIN_TOKEN
    if not expected:
        logger.warning("Admin request rejected: ADMIN_TOKEN not configured")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin API disabled")

    if x_admin_token is None or not secrets.compare_digest(x_admin_token, expected):
        logger.warning("Admin request rejected: invalid token")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")


# ============================================================================
# TYPE ALIASES FOR DEPENDENCY INJECTION
# ============================================================================
# Annotated aliases keep route signatures short:
#   async def route(cache: CacheDep): ...

CacheDep = Annotated[CacheCoordinator, Depends(get_cache)]

SettingsDep = Annotated[Settings, Depends(get_app_settings)]
