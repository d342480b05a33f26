"""
In-Process Key-Value Backend

Dict-based KeyValueBackend for tests and single-process local development.
Expiry is checked lazily on read. Pattern matching uses fnmatch, which
treats *, ? and [...] the way Redis glob patterns do.
"""

import time
from collections.abc import Callable, Iterable
from fnmatch import fnmatchcase
from typing import Any

from eventcache.core.exceptions import CacheConnectionError
from eventcache.core.logging.logger import get_logger

logger = get_logger(__name__)


class InMemoryBackend:
    """
    Usage:
        backend = InMemoryBackend()
        cache = CacheCoordinator(backend)

        # Simulate an outage
        backend.available = False
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.data: dict[str, str] = {}
        self.ttl_data: dict[str, float] = {}  # key -> expiration timestamp
        self.available = True
        self._clock = clock

    async def connect(self) -> None:
        self.available = True
        logger.info("In-memory cache backend ready")

    async def disconnect(self) -> None:
        self.available = False

    async def is_available(self) -> bool:
        return self.available

    async def get(self, key: str) -> str | None:
        self._ensure_available()
        self._expire(key)
        return self.data.get(key)

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._ensure_available()
        self.data[key] = value
        self.ttl_data[key] = self._clock() + ttl_seconds

    async def delete(self, key: str) -> None:
        self._ensure_available()
        self.data.pop(key, None)
        self.ttl_data.pop(key, None)

    async def keys_matching(self, pattern: str) -> list[str]:
        self._ensure_available()
        for key in list(self.ttl_data):
            self._expire(key)
        return [key for key in self.data if fnmatchcase(key, pattern)]

    async def delete_many(self, keys: Iterable[str]) -> None:
        self._ensure_available()
        for key in keys:
            self.data.pop(key, None)
            self.ttl_data.pop(key, None)

    async def flush_all(self) -> None:
        self._ensure_available()
        self.data.clear()
        self.ttl_data.clear()

    async def health_check(self) -> dict[str, Any]:
        return {
            "status": "healthy" if self.available else "unhealthy",
            "type": "in_memory",
            "keys": len(self.data),
        }

    def _expire(self, key: str) -> None:
        expires_at = self.ttl_data.get(key)
        if expires_at is not None and self._clock() >= expires_at:
            del self.ttl_data[key]
            self.data.pop(key, None)

    def _ensure_available(self) -> None:
        if not self.available:
            raise CacheConnectionError(message="In-memory backend is disabled")
