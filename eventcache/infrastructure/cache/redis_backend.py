"""
Redis Key-Value Backend

Architecture:
    RedisBackend (Public API, KeyValueBackend implementation)
        ├── ConnectionManager (Pool lifecycle and liveness flag)
        ├── Reconnector (Bounded background reconnect with tenacity)
        └── HealthMonitor (Ping latency and pool utilization)

Liveness:
    is_available() reads a flag, it never round-trips to Redis. The flag
    goes up after a successful connect/ping and goes down on the first
    connection or timeout error. Going down schedules a background
    reconnect: at most REDIS_MAX_RECONNECT_ATTEMPTS tries with an
    incrementing delay (50ms, 100ms, ... capped at 2s). When the attempts
    are exhausted the backend stays unavailable and the cache layer keeps
    serving from the origin.

Author: Platform Team
Date: 2025-12-13
"""

import asyncio
import time
from collections.abc import Iterable
from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError, RedisError, TimeoutError
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from eventcache.core.config.constants import DELETE_BATCH_SIZE, Stage
from eventcache.core.config.settings import Settings, get_settings
from eventcache.core.exceptions import CacheConnectionError, CacheKeyError
from eventcache.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)

RECONNECT_BASE_DELAY = 0.05
RECONNECT_MAX_DELAY = 2.0


# =============================================================================
# LAYER 1: CONNECTION MANAGEMENT
# =============================================================================


class ConnectionManager:
    """
    Owns the Redis connection pool and the liveness flag.

    Pool Configuration:
    - Max connections: REDIS_MAX_CONNECTIONS
    - Socket timeout: REDIS_SOCKET_TIMEOUT
    - Health check interval: REDIS_HEALTH_CHECK_INTERVAL
    - Decode responses: True (values come back as str)
    """

    def __init__(self, settings: Settings, client: redis.Redis | None = None):
        """
        Args:
            settings: Application settings
            client: Pre-built client, used instead of creating a pool
        """
        self._settings = settings
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = client
        self._is_connected = False

    async def connect(self) -> redis.Redis:
        """
        Create the pool (unless a client was injected) and verify it with PING.

        Raises:
            CacheConnectionError: If Redis is not configured or unreachable
        """
        if self._is_connected and self._client:
            return self._client

        redis_settings = self._settings.redis

        if self._client is None:
            if not redis_settings.REDIS_HOST:
                raise CacheConnectionError(
                    message="Redis is not configured (REDIS_HOST unset)",
                    details={"setting": "REDIS_HOST"},
                )
            self._pool = ConnectionPool(
                host=redis_settings.REDIS_HOST,
                port=redis_settings.REDIS_PORT,
                db=redis_settings.REDIS_DB,
                password=redis_settings.REDIS_PASSWORD,
                max_connections=redis_settings.REDIS_MAX_CONNECTIONS,
                socket_connect_timeout=redis_settings.REDIS_SOCKET_CONNECT_TIMEOUT,
                socket_timeout=redis_settings.REDIS_SOCKET_TIMEOUT,
                health_check_interval=redis_settings.REDIS_HEALTH_CHECK_INTERVAL,
                decode_responses=True,
            )
            self._client = redis.Redis(connection_pool=self._pool)

        try:
            await self._client.ping()
        except (ConnectionError, TimeoutError) as e:
            log_stage(logger, Stage.REDIS, "Failed to connect to Redis", level="error", error=str(e))
            raise CacheConnectionError(
                message=f"Failed to connect to Redis: {e}",
                details={"host": redis_settings.REDIS_HOST, "port": redis_settings.REDIS_PORT},
            ) from e

        self._is_connected = True
        log_stage(
            logger,
            Stage.REDIS,
            "Redis connected successfully",
            host=redis_settings.REDIS_HOST,
            port=redis_settings.REDIS_PORT,
            max_connections=redis_settings.REDIS_MAX_CONNECTIONS,
        )
        return self._client

    async def disconnect(self) -> None:
        if self._client:
            await self._client.aclose()

        if self._pool:
            await self._pool.disconnect()

        self._is_connected = False
        log_stage(logger, Stage.REDIS, "Redis disconnected")

    async def ping(self) -> bool:
        """Round-trip PING. Updates the liveness flag."""
        if self._client is None:
            return False
        try:
            await self._client.ping()
        except (ConnectionError, TimeoutError):
            self._is_connected = False
            return False
        self._is_connected = True
        return True

    def mark_connected(self) -> None:
        self._is_connected = True

    def mark_disconnected(self) -> None:
        self._is_connected = False

    def get_client(self) -> redis.Redis | None:
        return self._client

    def get_pool(self) -> ConnectionPool | None:
        return self._pool

    def is_connected(self) -> bool:
        return self._is_connected


# =============================================================================
# LAYER 2: RECONNECTION
# =============================================================================


class Reconnector:
    """
    Runs at most one background reconnect loop at a time.

    Attempts are bounded. After the last failed attempt the loop ends and
    the backend stays marked unavailable. The coordinator sends no commands
    to an unavailable backend, so no new loop is scheduled on its own:
    caching resumes after an explicit connect(), or when a successful
    ping() (issued by the cache health check) marks the backend live again.
    """

    def __init__(self, connection_manager: ConnectionManager, max_attempts: int):
        self._conn_mgr = connection_manager
        self._max_attempts = max_attempts
        self._task: asyncio.Task | None = None

    @property
    def in_progress(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self) -> None:
        if self.in_progress or self._max_attempts <= 0:
            return
        self._task = asyncio.create_task(self.run())

    async def run(self) -> bool:
        """Try to re-establish the connection. Returns True on success."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_incrementing(
                start=RECONNECT_BASE_DELAY,
                increment=RECONNECT_BASE_DELAY,
                max=RECONNECT_MAX_DELAY,
            ),
            retry=retry_if_exception_type((ConnectionError, TimeoutError)),
            before_sleep=lambda retry_state: log_stage(
                logger,
                Stage.REDIS,
                "Redis reconnect attempt failed",
                level="warning",
                attempt=retry_state.attempt_number,
                max_attempts=self._max_attempts,
            ),
        )

        try:
            async for attempt in retrying:
                with attempt:
                    client = self._conn_mgr.get_client()
                    if client is None:
                        raise CacheConnectionError(message="Redis client not initialized")
                    await client.ping()
        except (RetryError, RedisError, CacheConnectionError) as e:
            log_stage(
                logger,
                Stage.REDIS,
                "Redis reconnect attempts exhausted, caching stays disabled",
                level="error",
                max_attempts=self._max_attempts,
                error=str(e),
            )
            return False

        self._conn_mgr.mark_connected()
        log_stage(logger, Stage.REDIS, "Redis reconnected")
        return True

    async def cancel(self) -> None:
        if self.in_progress:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None


# =============================================================================
# LAYER 3: HEALTH MONITORING
# =============================================================================


class HealthMonitor:
    """Ping latency and pool utilization for the admin health endpoint."""

    POOL_WARNING_THRESHOLD_PCT = 80

    def __init__(self, connection_manager: ConnectionManager, settings: Settings):
        self._conn_mgr = connection_manager
        self._settings = settings

    async def health_check(self) -> dict[str, Any]:
        health = {
            "status": "healthy",
            "connected": self._conn_mgr.is_connected(),
            "host": self._settings.redis.REDIS_HOST,
            "port": self._settings.redis.REDIS_PORT,
            "pool_size": 0,
            "pool_utilization_pct": 0,
            "pool_warning": False,
            "ping_latency_ms": None,
        }

        client = self._conn_mgr.get_client()
        if not client:
            health["status"] = "unhealthy"
            health["error"] = "Client not initialized"
            return health

        try:
            start = time.perf_counter()
            await client.ping()
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
        except RedisError as e:
            health["status"] = "unhealthy"
            health["error"] = str(e)
            return health

        pool = self._conn_mgr.get_pool()
        if pool and hasattr(pool, "_available_connections"):
            health["pool_size"] = pool.max_connections
            in_use = pool.max_connections - len(pool._available_connections)
            utilization = 100.0 * in_use / pool.max_connections
            health["pool_utilization_pct"] = round(utilization, 1)

            if utilization > self.POOL_WARNING_THRESHOLD_PCT:
                health["pool_warning"] = True
                logger.warning(
                    "Redis pool utilization high",
                    pool_utilization=utilization,
                    max_connections=pool.max_connections,
                )

        return health


# =============================================================================
# LAYER 4: PUBLIC API
# =============================================================================


class RedisBackend:
    """
    KeyValueBackend over redis.asyncio.

    Every command failure is raised as a CacheError subclass; the cache
    coordinator decides what to do with it. Connection and timeout errors
    additionally flip the liveness flag off and schedule a reconnect.

    Usage:
        backend = RedisBackend()
        await backend.connect()

        cache = CacheCoordinator(backend)
        ...
        await backend.disconnect()
    """

    def __init__(self, settings: Settings | None = None, client: redis.Redis | None = None):
        self._settings = settings or get_settings()
        self._conn_mgr = ConnectionManager(self._settings, client=client)
        self._reconnector = Reconnector(
            self._conn_mgr, self._settings.redis.REDIS_MAX_RECONNECT_ATTEMPTS
        )
        self._health_monitor = HealthMonitor(self._conn_mgr, self._settings)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """
        Connect and verify with PING.

        An unreachable server also schedules the background reconnect, so a
        Redis that comes up shortly after the application still gets used.

        Raises:
            CacheConnectionError: If Redis is not configured or unreachable
        """
        try:
            await self._conn_mgr.connect()
        except CacheConnectionError:
            if self._conn_mgr.get_client() is not None:
                self._reconnector.schedule()
            raise

    async def disconnect(self) -> None:
        await self._reconnector.cancel()
        await self._conn_mgr.disconnect()

    async def ping(self) -> bool:
        return await self._conn_mgr.ping()

    async def health_check(self) -> dict[str, Any]:
        return await self._health_monitor.health_check()

    @property
    def reconnecting(self) -> bool:
        return self._reconnector.in_progress

    # -------------------------------------------------------------------------
    # KeyValueBackend
    # -------------------------------------------------------------------------

    async def is_available(self) -> bool:
        return self._conn_mgr.is_connected()

    async def get(self, key: str) -> str | None:
        return await self._execute("get", self._client().get(key), key=key)

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        await self._execute("set", self._client().set(key, value, ex=ttl_seconds), key=key)

    async def delete(self, key: str) -> None:
        await self._execute("delete", self._client().delete(key), key=key)

    async def keys_matching(self, pattern: str) -> list[str]:
        """
        Collect keys matching pattern with SCAN.

        SCAN walks the keyspace incrementally instead of blocking Redis the
        way KEYS does. Keys created during the walk may or may not be seen.
        """
        return await self._execute("scan", self._scan(pattern), pattern=pattern)

    async def delete_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        for i in range(0, len(keys), DELETE_BATCH_SIZE):
            chunk = keys[i : i + DELETE_BATCH_SIZE]
            await self._execute("delete_many", self._client().delete(*chunk), count=len(chunk))

    async def flush_all(self) -> None:
        """FLUSHDB: empties the configured Redis database only."""
        await self._execute("flushdb", self._client().flushdb())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _client(self) -> redis.Redis:
        client = self._conn_mgr.get_client()
        if client is None:
            raise CacheConnectionError(message="Redis client not initialized")
        return client

    async def _scan(self, pattern: str) -> list[str]:
        client = self._client()
        return [key async for key in client.scan_iter(match=pattern, count=DELETE_BATCH_SIZE)]

    async def _execute(self, operation: str, command, **context) -> Any:
        """
        Await a Redis command and translate its failures.

        Raises:
            CacheConnectionError: Connection lost or timed out
            CacheKeyError: Any other Redis error
        """
        try:
            return await command
        except (ConnectionError, TimeoutError) as e:
            self._conn_mgr.mark_disconnected()
            self._reconnector.schedule()
            log_stage(
                logger,
                Stage.REDIS,
                f"Redis {operation} failed: connection lost",
                level="error",
                error=str(e),
                **context,
            )
            raise CacheConnectionError(
                message=f"Redis {operation} failed: {e}", details={"operation": operation, **context}
            ) from e
        except RedisError as e:
            log_stage(
                logger, Stage.REDIS, f"Redis {operation} failed", level="error", error=str(e), **context
            )
            raise CacheKeyError(
                message=f"Redis {operation} failed: {e}", details={"operation": operation, **context}
            ) from e
