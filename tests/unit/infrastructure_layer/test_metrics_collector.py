"""
Unit Tests for the Prometheus Metrics Collector

Prometheus counters are process-global, so assertions compare values before
and after an action instead of absolute numbers.
"""

import pytest
from prometheus_client import REGISTRY

from eventcache.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


@pytest.mark.unit
class TestMetricsCollector:
    """Test metric recording through the collector."""

    def test_get_metrics_collector_is_singleton(self):
        assert get_metrics_collector() is get_metrics_collector()

    def test_hit_and_miss_counters(self):
        collector = MetricsCollector()
        hits_before = _sample("cache_hits_total")
        misses_before = _sample("cache_misses_total")

        collector.record_cache_hit()
        collector.record_cache_hit()
        collector.record_cache_miss()

        assert _sample("cache_hits_total") == hits_before + 2
        assert _sample("cache_misses_total") == misses_before + 1

    def test_backend_errors_labelled_by_operation(self):
        collector = MetricsCollector()
        before = _sample("cache_backend_errors_total", {"operation": "get"})

        collector.record_backend_error("get")

        assert _sample("cache_backend_errors_total", {"operation": "get"}) == before + 1

    def test_origin_fetch_records_outcome_and_duration(self):
        collector = MetricsCollector()
        before = _sample("cache_origin_fetches_total", {"outcome": "failure"})
        count_before = _sample("cache_origin_fetch_duration_seconds_count")

        collector.record_origin_fetch("failure", 0.2)

        assert _sample("cache_origin_fetches_total", {"outcome": "failure"}) == before + 1
        assert _sample("cache_origin_fetch_duration_seconds_count") == count_before + 1

    def test_inflight_gauge(self):
        collector = MetricsCollector()

        collector.set_inflight(4)
        assert _sample("cache_inflight_requests") == 4

        collector.set_inflight(0)
        assert _sample("cache_inflight_requests") == 0

    def test_prometheus_exposition(self):
        collector = MetricsCollector()
        collector.record_oversized_skip()

        output = collector.get_prometheus_metrics().decode("utf-8")

        assert "cache_oversized_skips_total" in output
        assert "cache_hits_total" in output
        assert collector.get_content_type().startswith("text/plain")
