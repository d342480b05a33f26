"""
Unit Tests for CacheKeys

Tests the key schema and that invalidation patterns match the keys they are
meant to remove.
"""

from fnmatch import fnmatchcase

import pytest

from eventcache.infrastructure.cache.keys import CacheKeys


@pytest.mark.unit
class TestCacheKeys:
    """Test key generation."""

    @pytest.mark.parametrize(
        "key, expected",
        [
            (CacheKeys.event(42), "event:42"),
            (CacheKeys.events_list_all(), "events:list:all"),
            (CacheKeys.events_list_active(), "events:list:active"),
            (CacheKeys.events_list_admin("u7"), "events:list:admin:u7"),
            (CacheKeys.leaderboard_event(3), "leaderboard:event:3"),
            (CacheKeys.leaderboard_round(8), "leaderboard:round:8"),
            (CacheKeys.rounds(3), "rounds:3"),
            (CacheKeys.questions(8), "questions:8"),
            (CacheKeys.participant(11), "participant:11"),
            (CacheKeys.participant_credential("u1", 3), "participant:credential:u1:3"),
            (CacheKeys.user("u1"), "user:u1"),
            (CacheKeys.registrations_all(), "registrations:all"),
            (CacheKeys.registrations_colleges(), "registrations:colleges"),
        ],
    )
    def test_key_format(self, key, expected):
        assert key == expected

    def test_events_list_pattern_matches_every_list(self):
        lists = [
            CacheKeys.events_list_all(),
            CacheKeys.events_list_active(),
            CacheKeys.events_list_admin(5),
        ]

        assert all(fnmatchcase(key, CacheKeys.EVENTS_LIST_PATTERN) for key in lists)
        assert not fnmatchcase(CacheKeys.event(5), CacheKeys.EVENTS_LIST_PATTERN)

    def test_leaderboard_pattern(self):
        assert fnmatchcase(CacheKeys.leaderboard_event(1), CacheKeys.LEADERBOARD_PATTERN)
        assert fnmatchcase(CacheKeys.leaderboard_round(1), CacheKeys.LEADERBOARD_PATTERN)
        assert not fnmatchcase(CacheKeys.rounds(1), CacheKeys.LEADERBOARD_PATTERN)

    def test_registrations_pattern(self):
        assert fnmatchcase(CacheKeys.registrations_all(), CacheKeys.REGISTRATIONS_PATTERN)
        assert fnmatchcase(CacheKeys.registrations_colleges(), CacheKeys.REGISTRATIONS_PATTERN)

    def test_scoped_patterns(self):
        assert CacheKeys.rounds_pattern(4) == "rounds:4*"
        assert CacheKeys.questions_pattern(9) == "questions:9*"

    def test_parse_key(self):
        assert CacheKeys.parse_key("leaderboard:round:8") == {"entity": "leaderboard", "rest": "round:8"}
        assert CacheKeys.parse_key("nocolon") is None
        assert CacheKeys.parse_key("") is None
