"""
Cache Module

Read-through cache coordinator with request coalescing, plus its Redis and
in-memory backends.
"""

from .coordinator import CacheCoordinator, CacheStats, WarmupEntry
from .invalidation import CacheInvalidator
from .keys import CacheKeys
from .memory_backend import InMemoryBackend
from .redis_backend import RedisBackend
from .serialization import JsonSerializer
from .warmup import warm_event_catalog

__all__ = [
    "CacheCoordinator",
    "CacheStats",
    "WarmupEntry",
    "CacheInvalidator",
    "CacheKeys",
    "InMemoryBackend",
    "RedisBackend",
    "JsonSerializer",
    "warm_event_catalog",
]
