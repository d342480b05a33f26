#!/usr/bin/env python3
"""
Metrics Collector with Prometheus Integration

This module provides Prometheus metrics for the cache layer:
- Cache hit/miss counters
- Oversized values skipped
- Backend errors by operation
- Origin fetches by outcome and coalesced waiters
- In-flight fetch gauge

The coordinator keeps its own process-lifetime counters for get_stats();
these metrics are the scrape-side view of the same events.

Author: Platform Team
Date: 2025-12-05
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from eventcache.core.logging.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Metric Definitions
# ============================================================================

CACHE_HITS = Counter(
    'cache_hits_total',
    'Total cache hits'
)

CACHE_MISSES = Counter(
    'cache_misses_total',
    'Total cache misses'
)

CACHE_OVERSIZED_SKIPS = Counter(
    'cache_oversized_skips_total',
    'Values not cached because they exceeded the size limit'
)

CACHE_BACKEND_ERRORS = Counter(
    'cache_backend_errors_total',
    'Backend failures recovered by the cache coordinator',
    ['operation']  # liveness, get, set, delete, delete_pattern, flush
)

CACHE_BYPASSES = Counter(
    'cache_bypass_total',
    'Lookups served straight from the origin because the backend was unavailable'
)

ORIGIN_FETCHES = Counter(
    'cache_origin_fetches_total',
    'Origin fetches started by the cache coordinator',
    ['outcome']  # success, failure
)

ORIGIN_FETCH_DURATION = Histogram(
    'cache_origin_fetch_duration_seconds',
    'Origin fetch duration in seconds',
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

COALESCED_REQUESTS = Counter(
    'cache_coalesced_requests_total',
    'Lookups that joined an in-flight origin fetch instead of starting one'
)

INFLIGHT_REQUESTS = Gauge(
    'cache_inflight_requests',
    'Origin fetches currently in flight'
)


# ============================================================================
# Metrics Collector Class
# ============================================================================


class MetricsCollector:
    """
    Thin wrapper over the module-level Prometheus metrics.

    Usage:
        metrics = get_metrics_collector()
        metrics.record_cache_hit()
        metrics.record_backend_error("get")
    """

    def record_cache_hit(self) -> None:
        CACHE_HITS.inc()

    def record_cache_miss(self) -> None:
        CACHE_MISSES.inc()

    def record_oversized_skip(self) -> None:
        CACHE_OVERSIZED_SKIPS.inc()

    def record_backend_error(self, operation: str) -> None:
        CACHE_BACKEND_ERRORS.labels(operation=operation).inc()

    def record_bypass(self) -> None:
        CACHE_BYPASSES.inc()

    def record_coalesced(self) -> None:
        COALESCED_REQUESTS.inc()

    def record_origin_fetch(self, outcome: str, duration: float) -> None:
        """
        Record a settled origin fetch.

        Args:
            outcome: 'success' or 'failure'
            duration: Fetch duration in seconds
        """
        ORIGIN_FETCHES.labels(outcome=outcome).inc()
        ORIGIN_FETCH_DURATION.observe(duration)

    def set_inflight(self, count: int) -> None:
        INFLIGHT_REQUESTS.set(count)

    def get_prometheus_metrics(self) -> bytes:
        """
        Get metrics in Prometheus text format.

        Returns:
            bytes: Prometheus metrics
        """
        return generate_latest(REGISTRY)

    def get_content_type(self) -> str:
        """Get Prometheus content type."""
        return CONTENT_TYPE_LATEST


_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """
    Get the process metrics collector.

    Returns:
        MetricsCollector: Process-wide collector instance
    """
    global _metrics_collector

    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
        logger.info("Metrics collector initialized")

    return _metrics_collector
