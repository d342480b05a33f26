"""
Unit Tests for InMemoryBackend
"""

import pytest

from eventcache.core.exceptions import CacheConnectionError
from eventcache.core.interfaces.cache import KeyValueBackend
from eventcache.infrastructure.cache.memory_backend import InMemoryBackend


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.mark.unit
class TestInMemoryBackend:
    """Test the dict-backed KeyValueBackend."""

    def test_implements_key_value_backend(self):
        assert isinstance(InMemoryBackend(), KeyValueBackend)

    @pytest.mark.asyncio
    async def test_set_and_get(self, memory_backend):
        await memory_backend.set_with_ttl("event:1", '{"id":1}', 60)

        assert await memory_backend.get("event:1") == '{"id":1}'
        assert await memory_backend.get("event:2") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ttl", [0, -1])
    async def test_non_positive_ttl_rejected(self, memory_backend, ttl):
        with pytest.raises(ValueError):
            await memory_backend.set_with_ttl("k", "v", ttl)

        assert memory_backend.data == {}

    @pytest.mark.asyncio
    async def test_value_expires_after_ttl(self):
        clock = FakeClock()
        backend = InMemoryBackend(clock=clock)
        await backend.set_with_ttl("k", "v", 30)

        clock.now = 29.9
        assert await backend.get("k") == "v"

        clock.now = 30.0
        assert await backend.get("k") is None
        assert "k" not in backend.data

    @pytest.mark.asyncio
    async def test_expired_keys_are_not_matched(self):
        clock = FakeClock()
        backend = InMemoryBackend(clock=clock)
        await backend.set_with_ttl("a:1", "v", 10)
        await backend.set_with_ttl("a:2", "v", 100)

        clock.now = 50.0

        assert await backend.keys_matching("a:*") == ["a:2"]

    @pytest.mark.asyncio
    async def test_keys_matching_glob_syntax(self, memory_backend):
        for key in ("rounds:1", "rounds:12", "rounds:2", "questions:1"):
            await memory_backend.set_with_ttl(key, "v", 60)

        assert sorted(await memory_backend.keys_matching("rounds:1*")) == ["rounds:1", "rounds:12"]
        assert sorted(await memory_backend.keys_matching("rounds:?")) == ["rounds:1", "rounds:2"]
        assert await memory_backend.keys_matching("[q]uestions:*") == ["questions:1"]

    @pytest.mark.asyncio
    async def test_delete_many_and_flush(self, memory_backend):
        for key in ("a", "b", "c"):
            await memory_backend.set_with_ttl(key, "v", 60)

        await memory_backend.delete_many(["a", "b", "missing"])
        assert list(memory_backend.data) == ["c"]

        await memory_backend.flush_all()
        assert memory_backend.data == {}
        assert memory_backend.ttl_data == {}

    @pytest.mark.asyncio
    async def test_operations_raise_when_unavailable(self, memory_backend):
        memory_backend.available = False

        assert await memory_backend.is_available() is False
        with pytest.raises(CacheConnectionError):
            await memory_backend.get("k")
        with pytest.raises(CacheConnectionError):
            await memory_backend.set_with_ttl("k", "v", 1)

    @pytest.mark.asyncio
    async def test_connect_and_disconnect_toggle_availability(self, memory_backend):
        await memory_backend.disconnect()
        assert await memory_backend.is_available() is False

        await memory_backend.connect()
        assert await memory_backend.is_available() is True

    @pytest.mark.asyncio
    async def test_health_check(self, memory_backend):
        await memory_backend.set_with_ttl("k", "v", 1)

        health = await memory_backend.health_check()

        assert health == {"status": "healthy", "type": "in_memory", "keys": 1}
