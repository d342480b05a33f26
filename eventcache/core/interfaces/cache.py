"""
Cache Collaborator Protocols

This module defines the contracts the cache coordinator depends on:

- KeyValueBackend: the external key-value store (Redis in production,
  an in-process dict in tests and local development)
- OriginFetcher: the per-call zero-argument coroutine producing the
  authoritative value (typically a database query)
- Serializer: the pluggable value encoding strategy

Every backend operation is asynchronous and may raise. The coordinator is
responsible for catching those failures; implementations should not try to
hide them.

Author: Platform Team
Date: 2025-12-08
"""

from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

OriginFetcher = Callable[[], Awaitable[T]]


@runtime_checkable
class KeyValueBackend(Protocol):
    """
    Protocol defining the key-value backend used by the cache coordinator.

    Implementations:
    - RedisBackend: Production Redis-backed store
    - InMemoryBackend: In-process store for tests and local development

    Usage:
        async def cached_or_none(backend: KeyValueBackend, key: str) -> str | None:
            if not await backend.is_available():
                return None
            return await backend.get(key)
    """

    async def is_available(self) -> bool:
        """
        Report whether the backend can currently serve requests.

        Returns:
            bool: True if commands may be sent, False otherwise
        """
        ...

    async def get(self, key: str) -> str | None:
        """
        Get the stored text for a key.

        Returns:
            Stored value or None if absent or expired
        """
        ...

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store a value that expires after ttl_seconds.

        ttl_seconds must be positive; implementations raise ValueError
        otherwise.
        """
        ...

    async def delete(self, key: str) -> None:
        """
        Remove a key. Absent keys are not an error.
        """
        ...

    async def keys_matching(self, pattern: str) -> list[str]:
        """
        List keys matching a glob-style pattern (*, ?, [...]).
        """
        ...

    async def delete_many(self, keys: Iterable[str]) -> None:
        """
        Remove several keys in one batch.
        """
        ...

    async def flush_all(self) -> None:
        """
        Remove every key in the cache namespace.
        """
        ...


@runtime_checkable
class ManagedBackend(KeyValueBackend, Protocol):
    """
    A KeyValueBackend with a connection lifecycle.

    The application connects it at startup and disconnects it at shutdown.
    Backends without these methods are used as they are.
    """

    async def connect(self) -> None:
        """
        Open the connection. Raises CacheConnectionError when unreachable.
        """
        ...

    async def disconnect(self) -> None:
        ...


@runtime_checkable
class Serializer(Protocol):
    """Encodes cache values to text and back."""

    def dumps(self, value: Any) -> str:
        """Encode a value. Raises CacheSerializationError on failure."""
        ...

    def loads(self, raw: str) -> Any:
        """Decode a stored value. Raises CacheDeserializationError on failure."""
        ...
