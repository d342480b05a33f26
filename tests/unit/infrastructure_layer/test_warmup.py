"""
Unit Tests for Event Catalog Warm-Up
"""

from dataclasses import dataclass

import orjson
import pytest

from eventcache.infrastructure.cache.coordinator import CacheCoordinator
from eventcache.infrastructure.cache.warmup import warm_event_catalog
from tests.test_fixtures.backend_factory import CountingFetcher


@dataclass
class Event:
    id: int
    name: str


@pytest.mark.unit
class TestWarmEventCatalog:
    """Test startup warm-up of events, registrations and colleges."""

    @pytest.mark.asyncio
    async def test_warms_list_events_registrations_and_colleges(self, cache, memory_backend):
        events = [{"id": 1, "name": "Quiz"}, {"id": 2, "name": "Hackathon"}]

        warmed = await warm_event_catalog(
            cache,
            fetch_events=CountingFetcher(value=events),
            fetch_registrations=CountingFetcher(value=[{"id": 100}]),
            fetch_colleges=CountingFetcher(value=["MIT", "IIT"]),
        )

        assert warmed == 5
        assert orjson.loads(memory_backend.data["events:list:all"]) == events
        assert orjson.loads(memory_backend.data["event:2"]) == {"id": 2, "name": "Hackathon"}
        assert orjson.loads(memory_backend.data["registrations:colleges"]) == ["MIT", "IIT"]
        assert "registrations:all" in memory_backend.data

    @pytest.mark.asyncio
    async def test_only_recent_events_cached_individually(self, cache, memory_backend):
        events = [{"id": i} for i in range(10)]

        await warm_event_catalog(cache, fetch_events=CountingFetcher(value=events), limit=3)

        event_keys = {key for key in memory_backend.data if key.startswith("event:")}
        assert event_keys == {"event:0", "event:1", "event:2"}
        assert len(orjson.loads(memory_backend.data["events:list:all"])) == 3

    @pytest.mark.asyncio
    async def test_attribute_style_events(self, cache, memory_backend):
        await warm_event_catalog(cache, fetch_events=CountingFetcher(value=[Event(7, "Finals")]))

        assert orjson.loads(memory_backend.data["event:7"]) == {"id": 7, "name": "Finals"}

    @pytest.mark.asyncio
    async def test_events_fetch_failure_returns_zero(self, cache, memory_backend):
        warmed = await warm_event_catalog(
            cache, fetch_events=CountingFetcher(error=RuntimeError("db down"))
        )

        assert warmed == 0
        assert memory_backend.data == {}

    @pytest.mark.asyncio
    async def test_skipped_when_backend_unavailable(self, unavailable_backend, mock_metrics):
        cache = CacheCoordinator(unavailable_backend, metrics=mock_metrics)
        fetch_events = CountingFetcher(value=[{"id": 1}])

        assert await warm_event_catalog(cache, fetch_events=fetch_events) == 0
        assert fetch_events.calls == 0
