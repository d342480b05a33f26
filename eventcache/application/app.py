#!/usr/bin/env python3
"""
FastAPI Application Entry Point

Composition root of the cache layer. The lifespan builds the key-value
backend selected by CACHE_BACKEND, wraps it in the single CacheCoordinator
the process uses, optionally warms it, and tears the backend down on
shutdown.

A backend that cannot be reached at startup is logged and the application
keeps serving: every lookup goes straight to the origin until the backend
comes back.

Author: Platform Team
Date: 2025-12-05
"""

import uuid
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from eventcache.application.api.routes.admin import router as admin_router
from eventcache.application.api.routes.health import router as health_router
from eventcache.core.config.constants import HEADER_REQUEST_ID, Stage
from eventcache.core.config.settings import Settings, get_settings
from eventcache.core.exceptions import CacheConnectionError, EventCacheError
from eventcache.core.interfaces.cache import KeyValueBackend, ManagedBackend
from eventcache.core.logging.logger import (
    clear_request_id,
    get_logger,
    log_stage,
    set_request_id,
    setup_logging,
)
from eventcache.infrastructure.cache.coordinator import CacheCoordinator
from eventcache.infrastructure.cache.invalidation import CacheInvalidator
from eventcache.infrastructure.cache.memory_backend import InMemoryBackend
from eventcache.infrastructure.cache.redis_backend import RedisBackend

logger = get_logger(__name__)

Warmup = Callable[[CacheCoordinator], Awaitable[Any]]


# ============================================================================
# Backend Selection
# ============================================================================


def build_backend(settings: Settings) -> ManagedBackend | None:
    """
    Create the (not yet connected) backend named by CACHE_BACKEND.

    Returns:
        Backend instance, or None when caching is disabled or Redis is not
        configured
    """
    backend_name = settings.cache.CACHE_BACKEND

    if backend_name == "none":
        log_stage(logger, Stage.STARTUP, "Caching disabled by configuration")
        return None

    if backend_name == "memory":
        return InMemoryBackend()

    if not settings.redis.REDIS_HOST:
        log_stage(logger, Stage.STARTUP, "REDIS_HOST not set, caching disabled", level="warning")
        return None

    return RedisBackend(settings)


async def _run_warmup(warmup: Warmup, cache: CacheCoordinator) -> None:
    try:
        await warmup(cache)
    except Exception as e:
        log_stage(logger, Stage.WARMING, "Cache warm-up failed", level="error", error=str(e))


# ============================================================================
# Application Factory
# ============================================================================


def create_app(
    settings: Settings | None = None,
    backend: KeyValueBackend | None = None,
    warmup: Warmup | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use (default: process settings)
        backend: Pre-built backend, overriding CACHE_BACKEND. Its connect()
            and disconnect() are called only if it is a ManagedBackend.
        warmup: Coroutine function called with the coordinator during
            startup when CACHE_WARM_ON_STARTUP is set

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

        logger.info(
            "Starting cache layer",
            stage=Stage.STARTUP.value,
            environment=settings.app.ENVIRONMENT,
            version=settings.app.APP_VERSION,
            backend=settings.cache.CACHE_BACKEND,
        )

        cache_backend = backend if backend is not None else build_backend(settings)
        if isinstance(cache_backend, ManagedBackend):
            try:
                await cache_backend.connect()
            except CacheConnectionError as e:
                log_stage(
                    logger,
                    Stage.STARTUP,
                    "Cache backend unreachable, serving uncached",
                    level="warning",
                    error=e.message,
                )

        cache = CacheCoordinator.from_settings(cache_backend, settings)
        app.state.cache = cache
        app.state.invalidator = CacheInvalidator(cache)

        if warmup is not None and settings.cache.CACHE_WARM_ON_STARTUP:
            await _run_warmup(warmup, cache)

        logger.info("Application startup complete", stage=Stage.STARTUP.value)

        try:
            yield
        finally:
            logger.info("Shutting down application", stage=Stage.SHUTDOWN.value)
            if isinstance(cache_backend, ManagedBackend):
                await cache_backend.disconnect()
            logger.info("Application shutdown complete", stage=Stage.SHUTDOWN.value)

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Read-through cache layer for the event platform",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ========================================================================
    # Middleware
    # ========================================================================

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Inject a request ID into all requests for log correlation."""
        request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
        set_request_id(request_id)

        try:
            response = await call_next(request)
            response.headers[HEADER_REQUEST_ID] = request_id
            return response
        finally:
            clear_request_id()

    # ========================================================================
    # Exception Handlers
    # ========================================================================

    @app.exception_handler(EventCacheError)
    async def cache_exception_handler(request: Request, exc: EventCacheError):
        logger.error(f"Cache layer exception: {exc.message}", error_type=type(exc).__name__)
        return JSONResponse(status_code=500, content=exc.to_dict())

    # ========================================================================
    # Routes
    # ========================================================================

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "name": settings.app.APP_NAME,
            "version": settings.app.APP_VERSION,
            "environment": settings.app.ENVIRONMENT,
            "health": "/health",
        }

    app.include_router(health_router)
    app.include_router(admin_router)

    return app


# Create application instance
app = create_app()


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "eventcache.application.app:app",
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        reload=settings.app.ENVIRONMENT == "development",
        log_level=settings.logging.LOG_LEVEL.lower(),
    )
