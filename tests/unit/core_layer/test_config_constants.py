"""
Unit Tests for Configuration Constants
"""

import pytest

from eventcache.core.config.constants import (
    DEFAULT_TTL,
    DELETE_BATCH_SIZE,
    MAX_OBJECT_SIZE,
    CacheTTL,
    Stage,
)


@pytest.mark.unit
class TestConstants:
    def test_max_object_size_is_one_mebibyte(self):
        assert MAX_OBJECT_SIZE == 1_048_576

    def test_default_ttl_is_one_hour(self):
        assert DEFAULT_TTL == 3600

    def test_delete_batch_size_positive(self):
        assert DELETE_BATCH_SIZE > 0

    def test_leaderboards_expire_fastest(self):
        ttls = [value for name, value in vars(CacheTTL).items() if name.isupper()]

        assert CacheTTL.LEADERBOARD == min(ttls) == 30

    def test_stage_values_are_strings(self):
        assert Stage.CACHE_READ == "C.1_CACHE_READ"
        assert all(isinstance(stage.value, str) for stage in Stage)
