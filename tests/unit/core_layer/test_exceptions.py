"""
Unit Tests for the Exception Hierarchy
"""

import pytest

from eventcache.core.exceptions import (
    CacheConnectionError,
    CacheDeserializationError,
    CacheError,
    CacheKeyError,
    CacheSerializationError,
    EventCacheError,
)


@pytest.mark.unit
class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc_class",
        [CacheConnectionError, CacheKeyError, CacheSerializationError, CacheDeserializationError],
    )
    def test_cache_errors_share_base(self, exc_class):
        error = exc_class("boom")

        assert isinstance(error, CacheError)
        assert isinstance(error, EventCacheError)
        assert error.message == "boom"


@pytest.mark.unit
class TestEventCacheError:
    """Test the base exception helpers."""

    def test_to_dict(self):
        error = CacheKeyError("Redis GET failed", request_id="req-1", details={"key": "event:1"})

        assert error.to_dict() == {
            "error_type": "CacheKeyError",
            "message": "Redis GET failed",
            "request_id": "req-1",
            "details": {"key": "event:1"},
        }

    def test_details_are_copied(self):
        details = {"key": "k"}
        error = CacheKeyError("failed", details=details)

        error.with_context(operation="get")

        assert details == {"key": "k"}
        assert error.details == {"key": "k", "operation": "get"}

    def test_with_context_returns_self(self):
        error = CacheError("failed")

        assert error.with_context(a=1) is error

    def test_from_exception_wraps_original(self):
        original = ValueError("bad payload")

        error = CacheSerializationError.from_exception(original, key="event:1")

        assert isinstance(error, CacheSerializationError)
        assert error.message == "bad payload"
        assert error.details["original_error"] == "ValueError"
        assert error.details["key"] == "event:1"

    def test_repr_includes_details(self):
        error = CacheKeyError("failed", details={"key": "k"})

        assert repr(error) == "CacheKeyError(message='failed', details={'key': 'k'})"
