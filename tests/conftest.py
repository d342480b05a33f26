"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def test_settings():
    """
    Real Settings instance isolated from any local .env file.

    Uses the in-memory backend and a known admin token.
    """
    from eventcache.core.config.settings import Settings

    return Settings(
        _env_file=None,
        CACHE_BACKEND="memory",
        ADMIN_TOKEN="test-admin-token",
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
        CACHE_WARM_ON_STARTUP=True,
    )


# ============================================================================
# Backend Fixtures
# ============================================================================


@pytest.fixture
def memory_backend():
    """Fresh in-process backend, available."""
    from eventcache.infrastructure.cache.memory_backend import InMemoryBackend

    return InMemoryBackend()


@pytest.fixture
def unavailable_backend():
    """In-process backend reporting itself down."""
    from tests.test_fixtures.backend_factory import BackendTestFactory

    return BackendTestFactory.unavailable_backend()


@pytest.fixture
def failing_backend():
    """Backend that claims to be available but fails every operation."""
    from tests.test_fixtures.backend_factory import BackendTestFactory

    return BackendTestFactory.failing_backend()


@pytest.fixture
def mock_redis_client():
    """AsyncMock standing in for a redis.asyncio.Redis client."""
    from tests.test_fixtures.backend_factory import BackendTestFactory

    return BackendTestFactory.mock_redis_client()


# ============================================================================
# Coordinator Fixtures
# ============================================================================


@pytest.fixture
def mock_metrics():
    """
    Mock MetricsCollector so tests do not depend on global Prometheus state.
    """
    from eventcache.infrastructure.monitoring.metrics_collector import MetricsCollector

    return MagicMock(spec=MetricsCollector)


@pytest.fixture
def cache(memory_backend, mock_metrics):
    """CacheCoordinator over the in-memory backend."""
    from eventcache.infrastructure.cache.coordinator import CacheCoordinator

    return CacheCoordinator(memory_backend, metrics=mock_metrics)


@pytest.fixture
def small_cache(memory_backend, mock_metrics):
    """CacheCoordinator with a 100-byte size limit."""
    from eventcache.infrastructure.cache.coordinator import CacheCoordinator

    return CacheCoordinator(memory_backend, max_object_size=100, metrics=mock_metrics)


# ============================================================================
# Origin Fetcher Fixtures
# ============================================================================


@pytest.fixture
def counting_fetcher():
    """Factory for CountingFetcher instances."""
    from tests.test_fixtures.backend_factory import CountingFetcher

    return CountingFetcher
