"""
Cache-Related Exceptions

All exceptions related to caching operations (Redis, serialization).
None of these cross the coordinator boundary: the coordinator catches them,
logs them and degrades to the origin fetcher.

Author: Platform Team
Date: 2025-12-08
"""

from eventcache.core.exceptions.base import EventCacheError


class CacheError(EventCacheError):
    """Base exception for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when unable to connect to the cache backend (Redis).

    Common causes:
    - Redis server is down
    - Network connectivity issues
    - Incorrect host/port configuration
    - Authentication failure
    """
    pass


class CacheKeyError(CacheError):
    """
    Raised when a backend key operation fails.

    Common causes:
    - Connection dropped mid-command
    - Operation timeout
    - Backend out of memory
    """
    pass


class CacheSerializationError(CacheError):
    """Raised when a value cannot be encoded for storage."""
    pass


class CacheDeserializationError(CacheError):
    """Raised when a stored value cannot be decoded (corrupted entry)."""
    pass
