"""
eventcache - read-through cache for the event platform.

Provides a cache coordinator with request coalescing, a bounded entry size,
fail-open degradation and pattern invalidation in front of the database.
"""

__version__ = "1.0.0"
