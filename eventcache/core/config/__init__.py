"""
Configuration Module

- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Stage identifiers, cache TTLs and other fixed values

Usage:
------
```python
from eventcache.core.config import get_settings
from eventcache.core.config.constants import CacheTTL, Stage

settings = get_settings()
max_size = settings.cache.CACHE_MAX_OBJECT_SIZE
ttl = CacheTTL.LEADERBOARD
```

Environment Variables:
---------------------
```bash
REDIS_HOST=localhost
REDIS_PORT=6379
CACHE_BACKEND=redis
CACHE_MAX_OBJECT_SIZE=1048576
ADMIN_TOKEN=change-me
```
"""

from eventcache.core.config.settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]
