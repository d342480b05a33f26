"""
Exception Module

Structured exception hierarchy for the cache layer.

Module Structure:
-----------------
- **base.py**: EventCacheError base class + ConfigurationError
- **cache.py**: Cache-related exceptions (Redis, serialization)

Usage:
------
```python
from eventcache.core.exceptions import CacheConnectionError, CacheKeyError
```
"""

from eventcache.core.exceptions.base import ConfigurationError, EventCacheError
from eventcache.core.exceptions.cache import (
    CacheConnectionError,
    CacheDeserializationError,
    CacheError,
    CacheKeyError,
    CacheSerializationError,
)

__all__ = [
    # Base
    "EventCacheError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "CacheSerializationError",
    "CacheDeserializationError",
]
