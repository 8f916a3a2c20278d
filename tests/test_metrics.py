# tests/test_metrics.py

import pytest

from repo_archive.monitoring import metrics as m
from repo_archive.monitoring.metrics import PrometheusMetrics


def test_counters_and_export():
    metrics = PrometheusMetrics()
    metrics.counter_inc(m.CACHE_HITS)
    metrics.counter_inc(m.CACHE_HITS, value=2)
    metrics.counter_inc(m.CACHE_MISSES, labels={"backend": "memory"})
    metrics.counter_inc(m.CACHE_MISSES, labels={"backend": "sqlite"})
    metrics.gauge_set(m.CACHE_ENTRIES, value=7)
    metrics.histogram_observe(m.COMPRESSION_RATIO, value=4.0)
    metrics.histogram_observe(m.COMPRESSION_RATIO, value=2.0)

    assert metrics.counter_value(m.CACHE_HITS) == 3
    assert metrics.counter_value(m.CACHE_MISSES, labels={"backend": "memory"}) == 1
    assert metrics.gauge_value(m.CACHE_ENTRIES) == 7

    text = metrics.export_prometheus()
    assert "# HELP archive_cache_hits_total Archive reads served from cache" in text
    assert "# TYPE archive_cache_hits_total counter" in text
    assert text.count("# TYPE archive_cache_misses_total counter") == 1
    assert 'archive_cache_misses_total{backend="memory"} 1' in text
    assert 'archive_cache_misses_total{backend="sqlite"} 1' in text
    assert "# TYPE archive_cache_entries gauge" in text
    assert "archive_cache_entries 7" in text
    assert "# TYPE archive_compression_ratio summary" in text
    assert "archive_compression_ratio_sum 6.0" in text
    assert "archive_compression_ratio_count 2" in text


def test_declared_type_is_enforced():
    metrics = PrometheusMetrics()
    with pytest.raises(ValueError):
        metrics.gauge_set(m.CACHE_HITS, value=1)


def test_undeclared_series_export_without_help():
    metrics = PrometheusMetrics()
    metrics.counter_inc("custom_total")
    text = metrics.export_prometheus()
    assert "# HELP custom_total" not in text
    assert "# TYPE custom_total counter" in text


def test_summary_window_is_bounded():
    metrics = PrometheusMetrics(window=1000)
    for _ in range(1500):
        metrics.histogram_observe("ratio", value=1.0)
    assert "ratio_count 1000" in metrics.export_prometheus()


def test_snapshot_and_reset():
    metrics = PrometheusMetrics()
    metrics.counter_inc(m.CACHE_STORES)
    metrics.histogram_observe(m.COMPRESSION_RATIO, value=3.0)

    snap = metrics.snapshot()
    assert snap["counters"][m.CACHE_STORES] == 1
    assert snap["summaries"][m.COMPRESSION_RATIO] == {"count": 1, "sum": 3.0}

    metrics.reset()
    assert metrics.counter_value(m.CACHE_STORES) == 0
    assert metrics.gauge_value(m.CACHE_ENTRIES) is None
    assert metrics.export_prometheus() == ""
