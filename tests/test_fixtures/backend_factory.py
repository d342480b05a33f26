"""
Backend Test Factory

Creates key-value backends, Redis client mocks and origin fetchers with
controllable behavior for testing.
"""

import asyncio
from fnmatch import fnmatchcase
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import orjson

from eventcache.core.exceptions import CacheKeyError
from eventcache.infrastructure.cache.memory_backend import InMemoryBackend


class CountingFetcher:
    """
    Origin fetcher that records how often it was called.

    Optionally blocks on a gate (asyncio.Event) or sleeps before answering,
    so tests can hold a fetch in flight while more lookups arrive.
    """

    def __init__(
        self,
        value: Any = None,
        error: Exception | None = None,
        delay: float = 0.0,
        gate: asyncio.Event | None = None,
    ):
        self.value = value
        self.error = error
        self.delay = delay
        self.gate = gate
        self.calls = 0

    async def __call__(self) -> Any:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        elif self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.value


class BackendTestFactory:
    """Factory for creating cache backend test objects."""

    @staticmethod
    def backend_with_data(initial_data: dict[str, Any] | None = None) -> InMemoryBackend:
        """In-memory backend pre-populated with already-serialized values."""
        backend = InMemoryBackend()
        for key, value in (initial_data or {}).items():
            backend.data[key] = orjson.dumps(value).decode("utf-8")
        return backend

    @staticmethod
    def unavailable_backend() -> InMemoryBackend:
        backend = InMemoryBackend()
        backend.available = False
        return backend

    @staticmethod
    def failing_backend(error: Exception | None = None) -> MagicMock:
        """Backend that reports itself available but fails every operation."""
        if error is None:
            error = CacheKeyError("Backend operation failed")

        backend = MagicMock()
        backend.is_available = AsyncMock(return_value=True)
        backend.get = AsyncMock(side_effect=error)
        backend.set_with_ttl = AsyncMock(side_effect=error)
        backend.delete = AsyncMock(side_effect=error)
        backend.keys_matching = AsyncMock(side_effect=error)
        backend.delete_many = AsyncMock(side_effect=error)
        backend.flush_all = AsyncMock(side_effect=error)
        return backend

    @staticmethod
    def mock_redis_client(initial_data: dict[str, str] | None = None) -> AsyncMock:
        """
        redis.asyncio.Redis stand-in backed by a dict.

        Supports ping, get, set(ex=), delete(*keys), flushdb, scan_iter(match=)
        and aclose.
        """
        client = AsyncMock()
        client.data = dict(initial_data or {})
        client.ttls = {}

        async def mock_get(key):
            return client.data.get(key)

        async def mock_set(key, value, ex=None):
            client.data[key] = value
            if ex:
                client.ttls[key] = ex
            return True

        async def mock_delete(*keys):
            removed = 0
            for key in keys:
                if key in client.data:
                    del client.data[key]
                    removed += 1
            return removed

        async def mock_flushdb():
            client.data.clear()
            return True

        async def scan(match=None, count=None):
            for key in list(client.data):
                if match is None or fnmatchcase(key, match):
                    yield key

        client.ping = AsyncMock(return_value=True)
        client.get = AsyncMock(side_effect=mock_get)
        client.set = AsyncMock(side_effect=mock_set)
        client.delete = AsyncMock(side_effect=mock_delete)
        client.flushdb = AsyncMock(side_effect=mock_flushdb)
        client.scan_iter = MagicMock(side_effect=scan)
        client.aclose = AsyncMock()

        return client
