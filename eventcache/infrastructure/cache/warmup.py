"""
Startup Cache Warm-Up for the Event Catalog

Pre-loads the reads every visitor hits first: the event list, the most
recent events individually, all registrations and the college list.

The events are fetched once; the list entry and the per-event entries are
all built from that one result.
"""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from eventcache.core.config.constants import WARMUP_EVENT_LIMIT, CacheTTL, Stage
from eventcache.core.logging.logger import get_logger, log_stage
from eventcache.infrastructure.cache.coordinator import CacheCoordinator, WarmupEntry
from eventcache.infrastructure.cache.keys import CacheKeys

logger = get_logger(__name__)


def _entity_id(entity: Any) -> Any:
    if isinstance(entity, Mapping):
        return entity["id"]
    return entity.id


def _constant(value: Any) -> Callable[[], Awaitable[Any]]:
    async def fetch() -> Any:
        return value

    return fetch


async def warm_event_catalog(
    cache: CacheCoordinator,
    fetch_events: Callable[[], Awaitable[Sequence[Any]]],
    fetch_registrations: Callable[[], Awaitable[Any]] | None = None,
    fetch_colleges: Callable[[], Awaitable[Any]] | None = None,
    limit: int = WARMUP_EVENT_LIMIT,
) -> int:
    """
    Warm the event catalog.

    Args:
        cache: Coordinator to populate
        fetch_events: Returns events newest first; each has an "id"
        fetch_registrations: Optional, cached under registrations:all
        fetch_colleges: Optional, cached under registrations:colleges
        limit: Number of recent events cached individually

    Returns:
        Number of entries written. 0 if the events could not be loaded.
    """
    if not await cache.is_available():
        log_stage(logger, Stage.WARMING, "Event catalog warm-up skipped: backend unavailable")
        return 0

    try:
        events = list(await fetch_events())
    except Exception as e:
        log_stage(logger, Stage.WARMING, "Event catalog warm-up failed", level="error", error=str(e))
        return 0

    recent = events[:limit]
    entries = [WarmupEntry(CacheKeys.events_list_all(), _constant(recent), CacheTTL.EVENTS_LIST)]
    entries.extend(
        WarmupEntry(CacheKeys.event(_entity_id(event)), _constant(event), CacheTTL.EVENT)
        for event in recent
    )
    if fetch_registrations is not None:
        entries.append(
            WarmupEntry(CacheKeys.registrations_all(), fetch_registrations, CacheTTL.REGISTRATIONS)
        )
    if fetch_colleges is not None:
        entries.append(
            WarmupEntry(CacheKeys.registrations_colleges(), fetch_colleges, CacheTTL.COLLEGES)
        )

    warmed = await cache.warm_cache(entries)
    log_stage(logger, Stage.WARMING, "Event catalog warmed", events=len(recent), entries=warmed)
    return warmed
