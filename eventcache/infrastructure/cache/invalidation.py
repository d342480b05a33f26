"""Write-side cache invalidation.

After a mutation the write path must drop every cached read that can
observe it. CacheInvalidator groups those deletions per kind of change so
routes call one method instead of repeating key lists.

Every method inherits the coordinator's fail-open behavior: with the backend
down nothing is deleted and nothing is raised.

Example:
    invalidator = CacheInvalidator(cache)

    await storage.update_event(event_id, changes)
    await invalidator.event_updated(event_id)
"""

from eventcache.core.config.constants import Stage
from eventcache.core.logging.logger import get_logger, log_stage
from eventcache.infrastructure.cache.coordinator import CacheCoordinator
from eventcache.infrastructure.cache.keys import CacheKeys

logger = get_logger(__name__)


class CacheInvalidator:
    """Maps domain changes to the cache keys and patterns they invalidate."""

    def __init__(self, cache: CacheCoordinator):
        self._cache = cache

    async def event_created(self) -> None:
        await self._cache.delete_pattern(CacheKeys.EVENTS_LIST_PATTERN)

    async def event_updated(self, event_id: object) -> None:
        """Event details changed: the event, every event list and leaderboards."""
        await self._cache.delete(CacheKeys.event(event_id))
        await self._cache.delete_pattern(CacheKeys.EVENTS_LIST_PATTERN)
        await self._cache.delete_pattern(CacheKeys.LEADERBOARD_PATTERN)
        log_stage(logger, Stage.INVALIDATION, "Event cache invalidated", level="debug", event_id=event_id)

    async def event_deleted(self, event_id: object) -> None:
        await self._cache.delete(CacheKeys.event(event_id))
        await self._cache.delete_pattern(CacheKeys.EVENTS_LIST_PATTERN)
        await self._cache.delete_pattern(CacheKeys.rounds_pattern(event_id))
        await self._cache.delete_pattern(CacheKeys.LEADERBOARD_PATTERN)
        log_stage(logger, Stage.INVALIDATION, "Deleted event evicted from cache", level="debug", event_id=event_id)

    async def round_created(self, event_id: object) -> None:
        await self._cache.delete(CacheKeys.rounds(event_id))

    async def round_changed(self, event_id: object, round_id: object | None = None) -> None:
        """
        A round was updated, deleted, started or ended.

        Leaderboards are always dropped since round status decides which
        scores count. Passing round_id also drops that round's questions.
        """
        await self._cache.delete(CacheKeys.rounds(event_id))
        if round_id is not None:
            await self._cache.delete_pattern(CacheKeys.questions_pattern(round_id))
        await self._cache.delete_pattern(CacheKeys.LEADERBOARD_PATTERN)

    async def questions_changed(self, round_id: object) -> None:
        await self._cache.delete(CacheKeys.questions(round_id))

    async def scores_changed(self) -> None:
        """A test was submitted or a score was edited."""
        await self._cache.delete_pattern(CacheKeys.LEADERBOARD_PATTERN)

    async def registrations_changed(self) -> None:
        await self._cache.delete_pattern(CacheKeys.REGISTRATIONS_PATTERN)

    async def everything(self) -> None:
        """Drop the whole cache namespace."""
        await self._cache.flush_all()
