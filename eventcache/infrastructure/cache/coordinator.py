#!/usr/bin/env python3
"""
Read-Through Cache Coordinator

Architecture:
    CacheCoordinator (Public API)
        ├── InFlightRegistry (one origin fetch per key at a time)
        ├── CacheObserver (statistics, logging, metrics)
        └── CacheWarmer (startup warm-up)

    Collaborators:
        ├── KeyValueBackend (Redis / in-memory, may be absent or down)
        ├── Serializer (orjson text encoding by default)
        └── OriginFetcher (per call, usually a database query)

Lookup flow:
    1. Backend liveness check. Unavailable → call the origin, cache nothing.
    2. Backend read. Hit → decode and return. Undecodable → treat as a miss.
    3. Miss → join the in-flight fetch for the key, or start one.
    4. Fetch settles → store the value (size permitting) and hand the same
       result, or the same exception, to every waiter.

Only origin fetch failures reach callers. Every backend or serialization
failure is logged and turned into "behave as if there were no cache".

Author: Platform Team
Date: 2025-12-13
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from eventcache.core.config.constants import DEFAULT_TTL, MAX_OBJECT_SIZE, Stage
from eventcache.core.config.settings import Settings, get_settings
from eventcache.core.exceptions import (
    CacheDeserializationError,
    CacheSerializationError,
    ConfigurationError,
)
from eventcache.core.interfaces.cache import KeyValueBackend, OriginFetcher, Serializer
from eventcache.core.logging.logger import get_logger, log_stage
from eventcache.infrastructure.cache.serialization import JsonSerializer, encoded_size
from eventcache.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)

logger = get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# LAYER 1: IN-FLIGHT REGISTRY
# Request coalescing: at most one origin fetch per key at any instant
# =============================================================================


class InFlightRegistry:
    """
    Maps cache key → the task currently computing that key's value.

    get_or_create() contains no await, so on a single event loop the
    "is anything in flight?" check and the registration of the new task
    happen as one step. Two lookups for the same key can never both see
    "absent" and both start a fetch.

    A task removes its own entry when it settles, successfully or not. The
    identity check keeps a late-finishing task from removing a newer entry
    registered under the same key.
    """

    def __init__(self, on_change: Callable[[int], None] | None = None):
        self._requests: dict[str, asyncio.Task] = {}
        self._on_change = on_change

    def get_or_create(
        self, key: str, factory: Callable[[], Awaitable[T]]
    ) -> tuple["asyncio.Task[T]", bool]:
        """
        Return the in-flight task for key, starting one from factory if none.

        Returns:
            (task, created) where created is False when the caller joined an
            existing fetch
        """
        existing = self._requests.get(key)
        if existing is not None:
            return existing, False

        task = asyncio.ensure_future(self._run(key, factory))
        self._requests[key] = task
        self._notify()
        return task, True

    async def _run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        try:
            return await factory()
        finally:
            if self._requests.get(key) is asyncio.current_task():
                del self._requests[key]
                self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(len(self._requests))

    def __contains__(self, key: str) -> bool:
        return key in self._requests

    def __len__(self) -> int:
        return len(self._requests)


# =============================================================================
# LAYER 2: OBSERVABILITY
# Statistics, structured logging and Prometheus forwarding
# =============================================================================


@dataclass(frozen=True)
class CacheStats:
    """Read-only snapshot of the coordinator counters."""

    hits: int
    misses: int
    pending_requests: int
    oversized_skips: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """hits / (hits + misses), 0.0 before the first lookup."""
        total = self.total_requests
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "total_requests": self.total_requests,
            "hit_rate": self.hit_rate,
            "hit_rate_pct": f"{self.hit_rate * 100:.2f}%",
            "pending_requests": self.pending_requests,
            "oversized_skips": self.oversized_skips,
        }


class CacheObserver:
    """
    Tracks cache counters and owns every logging/metrics side effect.

    Counters are process-lifetime and only ever increase. Nothing here
    resets them, get_stats() included.
    """

    def __init__(self, metrics: MetricsCollector | None = None, logger_instance=None):
        self._metrics = metrics or get_metrics_collector()
        self._logger = logger_instance or logger

        self._hits = 0
        self._misses = 0
        self._oversized = 0

    def record_hit(self, key: str) -> None:
        self._hits += 1
        self._metrics.record_cache_hit()
        log_stage(self._logger, Stage.CACHE_READ, "Cache hit", level="debug", cache_key=key)

    def record_miss(self, key: str) -> None:
        self._misses += 1
        self._metrics.record_cache_miss()
        log_stage(self._logger, Stage.CACHE_READ, "Cache miss", level="debug", cache_key=key)

    def record_corrupt_entry(self, key: str, error: Exception) -> None:
        log_stage(
            self._logger,
            Stage.CACHE_READ,
            "Cached value could not be decoded, refetching",
            level="warning",
            cache_key=key,
            error=str(error),
        )

    def record_bypass(self, key: str) -> None:
        self._metrics.record_bypass()
        log_stage(
            self._logger,
            Stage.BACKEND_LIVENESS,
            "Cache backend unavailable, calling origin directly",
            level="debug",
            cache_key=key,
        )

    def record_backend_error(self, operation: str, error: Exception, **context) -> None:
        self._metrics.record_backend_error(operation)
        log_stage(
            self._logger,
            Stage.REDIS,
            f"Cache {operation} error",
            level="error",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **context,
        )

    def record_oversized(self, key: str, size: int, limit: int) -> None:
        self._oversized += 1
        self._metrics.record_oversized_skip()
        log_stage(
            self._logger,
            Stage.CACHE_WRITE,
            "Skipping cache write: object size exceeds limit",
            level="warning",
            cache_key=key,
            size=size,
            limit=limit,
        )

    def record_coalesced(self, key: str) -> None:
        self._metrics.record_coalesced()
        log_stage(
            self._logger, Stage.INFLIGHT, "Waiting for in-flight fetch", level="debug", cache_key=key
        )

    def record_fetch(self, key: str, outcome: str, duration: float) -> None:
        self._metrics.record_origin_fetch(outcome, duration)
        log_stage(
            self._logger,
            Stage.ORIGIN_FETCH,
            "Origin fetch settled",
            level="debug" if outcome == "success" else "warning",
            cache_key=key,
            outcome=outcome,
            duration_ms=round(duration * 1000, 2),
        )

    def set_inflight(self, count: int) -> None:
        self._metrics.set_inflight(count)

    def snapshot(self, pending_requests: int) -> CacheStats:
        return CacheStats(
            hits=self._hits,
            misses=self._misses,
            pending_requests=pending_requests,
            oversized_skips=self._oversized,
        )


# =============================================================================
# LAYER 3: CACHE WARMING
# =============================================================================


@dataclass(frozen=True)
class WarmupEntry:
    """A key to pre-populate, the fetcher producing its value and its TTL."""

    key: str
    fetcher: OriginFetcher
    ttl: int | None = None

    def __post_init__(self):
        if self.ttl is not None and self.ttl <= 0:
            raise ValueError(f"warm-up ttl for {self.key!r} must be positive")


class CacheWarmer:
    """
    Pre-loads known hot keys, typically at application startup.

    Warm-up is best effort: a failing fetcher is logged and skipped, the
    remaining entries are still written.
    """

    def __init__(self, coordinator: "CacheCoordinator"):
        self._coordinator = coordinator

    async def warm(self, entries: Iterable[WarmupEntry]) -> int:
        """
        Fetch and store every entry.

        Returns:
            Number of entries actually written to the backend
        """
        if not await self._coordinator.is_available():
            log_stage(logger, Stage.WARMING, "Cache warm-up skipped: backend unavailable")
            return 0

        log_stage(logger, Stage.WARMING, "Starting cache warm-up")
        warmed = 0
        failed = 0

        for entry in entries:
            try:
                value = await entry.fetcher()
            except Exception as e:
                failed += 1
                log_stage(
                    logger,
                    Stage.WARMING,
                    "Cache warm-up fetch failed",
                    level="warning",
                    cache_key=entry.key,
                    error=str(e),
                )
                continue

            if await self._coordinator.set(entry.key, value, entry.ttl):
                warmed += 1

        log_stage(logger, Stage.WARMING, "Cache warm-up complete", warmed=warmed, failed=failed)
        return warmed


# =============================================================================
# LAYER 4: PUBLIC API
# =============================================================================


class CacheCoordinator:
    """
    Read-through cache with request coalescing and fail-open degradation.

    Constructed once by the application's composition root and passed to
    whatever needs caching. Holds no state across calls beyond its counters
    and the in-flight registry.

    Usage:
        cache = CacheCoordinator(backend, max_object_size=1024 * 1024)

        leaderboard = await cache.get(
            CacheKeys.leaderboard_round(round_id),
            lambda: storage.get_round_leaderboard(round_id),
            CacheTTL.LEADERBOARD,
        )

        # After a score-affecting write
        await cache.delete_pattern(CacheKeys.LEADERBOARD_PATTERN)

        stats = cache.get_stats()
    """

    def __init__(
        self,
        backend: KeyValueBackend | None,
        *,
        serializer: Serializer | None = None,
        max_object_size: int = MAX_OBJECT_SIZE,
        default_ttl: int = DEFAULT_TTL,
        fetch_timeout: float | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Args:
            backend: Key-value backend, or None when caching is not configured
            serializer: Value encoding strategy (default: JsonSerializer)
            max_object_size: Largest serialized value in bytes that is cached
            default_ttl: TTL used when a call passes none
            fetch_timeout: Optional origin fetch timeout in seconds. None
                (the default) lets a fetch run for as long as it takes.
            metrics: Prometheus collector (default: process collector)

        Raises:
            ConfigurationError: If a size, TTL or timeout limit is not positive
        """
        if max_object_size <= 0 or default_ttl <= 0:
            raise ConfigurationError(
                "Cache size limit and default TTL must be positive",
                details={"max_object_size": max_object_size, "default_ttl": default_ttl},
            )
        if fetch_timeout is not None and fetch_timeout <= 0:
            raise ConfigurationError(
                "Origin fetch timeout must be positive", details={"fetch_timeout": fetch_timeout}
            )

        self._backend = backend
        self._serializer = serializer or JsonSerializer()
        self._max_object_size = max_object_size
        self._default_ttl = default_ttl
        self._fetch_timeout = fetch_timeout

        self._observer = CacheObserver(metrics)
        self._inflight = InFlightRegistry(on_change=self._observer.set_inflight)
        self._warmer = CacheWarmer(self)

        logger.info(
            "Cache coordinator initialized",
            stage=Stage.STARTUP.value,
            backend=type(backend).__name__ if backend is not None else None,
            max_object_size=max_object_size,
            default_ttl=default_ttl,
            fetch_timeout=fetch_timeout,
        )

    @classmethod
    def from_settings(
        cls, backend: KeyValueBackend | None, settings: Settings | None = None
    ) -> "CacheCoordinator":
        """Build a coordinator configured from the cache settings group."""
        settings = settings or get_settings()
        return cls(
            backend,
            max_object_size=settings.cache.CACHE_MAX_OBJECT_SIZE,
            default_ttl=settings.cache.CACHE_DEFAULT_TTL,
            fetch_timeout=settings.cache.CACHE_FETCH_TIMEOUT,
        )

    @property
    def backend(self) -> KeyValueBackend | None:
        return self._backend

    @property
    def max_object_size(self) -> int:
        return self._max_object_size

    @property
    def pending_request_count(self) -> int:
        return len(self._inflight)

    # -------------------------------------------------------------------------
    # Liveness
    # -------------------------------------------------------------------------

    async def is_available(self) -> bool:
        """
        Check backend liveness.

        STAGE-C.0: Backend liveness

        A missing backend, a backend reporting itself down and a liveness
        check that raises all count as unavailable.
        """
        if self._backend is None:
            return False
        try:
            return bool(await self._backend.is_available())
        except Exception as e:
            self._observer.record_backend_error("liveness", e)
            return False

    # -------------------------------------------------------------------------
    # Read-through
    # -------------------------------------------------------------------------

    async def get(self, key: str, fetcher: OriginFetcher[T], ttl: int | None = None) -> T:
        """
        Return the cached value for key, fetching and caching it on a miss.

        STAGE-C.0 → C.4

        Concurrent misses on the same key share one call to fetcher: every
        caller receives the same value, or the same exception.

        Args:
            key: Non-empty cache key (e.g. "leaderboard:round:12")
            fetcher: Zero-argument coroutine function producing the value
            ttl: Seconds the value stays cached (default: coordinator default)

        Returns:
            Cached or freshly fetched value. None is a valid, cacheable value.

        Raises:
            ValueError: If key is empty or ttl is not positive
            Exception: Whatever fetcher raised, when no cached value exists
        """
        if not key:
            raise ValueError("cache key must be a non-empty string")
        ttl = self._resolve_ttl(ttl)

        if not await self.is_available():
            self._observer.record_bypass(key)
            return await self._call_origin(fetcher)

        try:
            raw = await self._backend.get(key)
        except Exception as e:
            self._observer.record_backend_error("get", e, cache_key=key)
            return await self._call_origin(fetcher)

        if raw is not None:
            try:
                value = self._serializer.loads(raw)
            except (CacheDeserializationError, ValueError, TypeError) as e:
                self._observer.record_corrupt_entry(key, e)
            else:
                self._observer.record_hit(key)
                return value

        self._observer.record_miss(key)

        task, created = self._inflight.get_or_create(
            key, lambda: self._fetch_and_store(key, fetcher, ttl)
        )
        if not created:
            self._observer.record_coalesced(key)

        # shield: a cancelled waiter must not cancel the fetch other waiters share
        return await asyncio.shield(task)

    async def _fetch_and_store(self, key: str, fetcher: OriginFetcher[T], ttl: int) -> T:
        """
        Run the origin fetch for an in-flight entry and cache its result.

        STAGE-C.3: Origin fetch
        """
        started = time.perf_counter()
        try:
            value = await self._call_origin(fetcher)
        except Exception:
            self._observer.record_fetch(key, "failure", time.perf_counter() - started)
            raise

        self._observer.record_fetch(key, "success", time.perf_counter() - started)
        await self.set(key, value, ttl)
        return value

    async def _call_origin(self, fetcher: OriginFetcher[T]) -> T:
        if self._fetch_timeout is None:
            return await fetcher()
        return await asyncio.wait_for(fetcher(), timeout=self._fetch_timeout)

    def _resolve_ttl(self, ttl: int | None) -> int:
        if ttl is None:
            return self._default_ttl
        if ttl <= 0:
            raise ValueError(f"cache ttl must be a positive number of seconds, got {ttl}")
        return ttl

    # -------------------------------------------------------------------------
    # Writes and invalidation
    # -------------------------------------------------------------------------

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """
        Store a value with a TTL.

        STAGE-C.4: Cache write

        Values whose serialized form exceeds max_object_size are never
        written; a warning is logged instead. No-op when the backend is
        unavailable. Backend failures are logged, never raised.

        Returns:
            True if the value was written to the backend

        Raises:
            ValueError: If ttl is not positive
        """
        ttl = self._resolve_ttl(ttl)

        if not await self.is_available():
            return False

        try:
            raw = self._serializer.dumps(value)
        except (CacheSerializationError, TypeError, ValueError) as e:
            log_stage(
                logger,
                Stage.CACHE_WRITE,
                "Skipping cache write: value not serializable",
                level="warning",
                cache_key=key,
                error=str(e),
            )
            return False

        size = encoded_size(raw)
        if size > self._max_object_size:
            self._observer.record_oversized(key, size, self._max_object_size)
            return False

        try:
            await self._backend.set_with_ttl(key, raw, ttl)
        except Exception as e:
            self._observer.record_backend_error("set", e, cache_key=key)
            return False

        log_stage(logger, Stage.CACHE_WRITE, "Cache set", level="debug", cache_key=key, ttl=ttl, size=size)
        return True

    async def delete(self, key: str) -> None:
        """
        Remove a single key.

        STAGE-C.5: Invalidation

        No-op if the key is absent or the backend is unavailable.
        """
        if not await self.is_available():
            return

        try:
            await self._backend.delete(key)
        except Exception as e:
            self._observer.record_backend_error("delete", e, cache_key=key)
            return

        log_stage(logger, Stage.INVALIDATION, "Cache key deleted", level="debug", cache_key=key)

    async def invalidate(self, key: str) -> None:
        """Alias for delete()."""
        await self.delete(key)

    async def delete_pattern(self, pattern: str) -> int:
        """
        Remove every key matching a glob-style pattern in one batch.

        STAGE-C.5: Invalidation

        Cost grows with the size of the backend keyspace, not with the number
        of matching keys.

        Args:
            pattern: Glob pattern, e.g. "leaderboard:*" or "events:list*"

        Returns:
            Number of keys removed (0 when unavailable or on error)
        """
        if not await self.is_available():
            return 0

        try:
            keys = await self._backend.keys_matching(pattern)
            if keys:
                await self._backend.delete_many(keys)
        except Exception as e:
            self._observer.record_backend_error("delete_pattern", e, pattern=pattern)
            return 0

        log_stage(
            logger, Stage.INVALIDATION, "Cache pattern deleted", level="debug", pattern=pattern, count=len(keys)
        )
        return len(keys)

    async def flush_all(self) -> None:
        """
        Empty the whole cache namespace.

        Administrative operation. Callers are responsible for restricting it
        to privileged users.
        """
        if not await self.is_available():
            return

        try:
            await self._backend.flush_all()
        except Exception as e:
            self._observer.record_backend_error("flush", e)
            return

        log_stage(logger, Stage.INVALIDATION, "Cache flushed")

    # -------------------------------------------------------------------------
    # Warming
    # -------------------------------------------------------------------------

    async def warm_cache(self, entries: Iterable[WarmupEntry]) -> int:
        """
        Pre-populate the cache.

        Returns:
            Number of entries written
        """
        return await self._warmer.warm(entries)

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    def get_stats(self) -> CacheStats:
        """Snapshot of hits, misses, hit rate and in-flight fetches."""
        return self._observer.snapshot(pending_requests=len(self._inflight))

    async def health_check(self) -> dict[str, Any]:
        """
        Report cache health.

        "degraded" means lookups are served from the origin without caching;
        the application itself stays up.

        A configured backend that reports itself unavailable is pinged first
        (when it supports ping()), so a server that came back after the
        reconnect attempts ran out is picked up again. The backend's own
        health_check() report, when it has one, is included under "backend".
        """
        if self._backend is not None and not await self.is_available():
            await self._probe_backend()

        available = await self.is_available()
        health = {
            "status": "healthy" if available else "degraded",
            "backend_configured": self._backend is not None,
            "backend_available": available,
            "stats": self.get_stats().to_dict(),
        }

        backend_health = getattr(self._backend, "health_check", None)
        if backend_health is not None:
            try:
                health["backend"] = await backend_health()
            except Exception as e:
                self._observer.record_backend_error("health_check", e)
                health["backend"] = {"status": "error", "error": str(e)}

        return health

    async def _probe_backend(self) -> None:
        ping = getattr(self._backend, "ping", None)
        if ping is None:
            return
        try:
            if await ping():
                log_stage(logger, Stage.BACKEND_LIVENESS, "Cache backend reachable again")
        except Exception as e:
            self._observer.record_backend_error("ping", e)
