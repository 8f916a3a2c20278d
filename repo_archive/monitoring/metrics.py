# metrics.py - Prometheus-Compatible Metrics
# ============================================================================
# FILE: repo_archive/monitoring/metrics.py
# Declared metric families for archive cache activity, exported in the
# Prometheus text format
# ============================================================================

import time
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, Optional, Tuple

# Metric names emitted by ArchiveCacheManager
CACHE_HITS = "archive_cache_hits_total"
CACHE_MISSES = "archive_cache_misses_total"
CACHE_EXPIRED = "archive_cache_expired_total"
CACHE_CORRUPT = "archive_cache_corrupt_total"
CACHE_EVICTIONS = "archive_cache_evictions_total"
CACHE_STORES = "archive_cache_stores_total"
INTEGRITY_FAILURES = "archive_cache_integrity_failures_total"
COMPRESSION_RATIO = "archive_compression_ratio"
CACHE_ENTRIES = "archive_cache_entries"

SUMMARY_WINDOW = 1000

Labels = Optional[Dict[str, str]]
SeriesKey = Tuple[str, Tuple[Tuple[str, str], ...]]


@dataclass(frozen=True)
class MetricFamily:
    name: str
    kind: str
    help: str


FAMILIES: Dict[str, MetricFamily] = {
    f.name: f
    for f in (
        MetricFamily(CACHE_HITS, "counter", "Archive reads served from cache"),
        MetricFamily(CACHE_MISSES, "counter", "Archive reads with no stored entry"),
        MetricFamily(CACHE_EXPIRED, "counter", "Entries deleted for exceeding max age"),
        MetricFamily(CACHE_CORRUPT, "counter", "Unreadable entries deleted"),
        MetricFamily(CACHE_EVICTIONS, "counter", "Entries evicted by the archive cap"),
        MetricFamily(CACHE_STORES, "counter", "Archives written and verified"),
        MetricFamily(INTEGRITY_FAILURES, "counter", "Writes that failed read-back verification"),
        MetricFamily(COMPRESSION_RATIO, "summary", "Original / compressed size per stored archive"),
        MetricFamily(CACHE_ENTRIES, "gauge", "Entries currently held by the backend"),
    )
}


def _series_key(name: str, labels: Labels) -> SeriesKey:
    return name, tuple(sorted((labels or {}).items()))


def _render(key: SeriesKey, suffix: str = "") -> str:
    name, labels = key
    if not labels:
        return f"{name}{suffix}"
    label_str = ",".join(f'{k}="{v}"' for k, v in labels)
    return f"{name}{suffix}{{{label_str}}}"


def _family_for(name: str, kind: str) -> MetricFamily:
    family = FAMILIES.get(name)
    if family is None:
        return MetricFamily(name, kind, "")
    if family.kind != kind:
        raise ValueError(f"{name} is declared as a {family.kind}, not a {kind}")
    return family


class PrometheusMetrics:
    """
    Thread-safe collector for the archive cache.

    Counters and gauges hold one value per label set. Summaries keep the
    last `window` observations and export their sum and count. Names in
    FAMILIES are type-checked and exported with their HELP text; any other
    name is accepted as an undocumented series.
    """

    def __init__(self, window: int = SUMMARY_WINDOW):
        self.window = window
        self._lock = threading.Lock()
        self._counters: Dict[SeriesKey, int] = {}
        self._gauges: Dict[SeriesKey, float] = {}
        self._summaries: Dict[SeriesKey, Deque[float]] = {}
        self._families: Dict[str, MetricFamily] = {}
        self._start_time = time.time()

    def _track(self, name: str, kind: str):
        if name not in self._families:
            self._families[name] = _family_for(name, kind)

    def counter_inc(self, name: str, labels: Labels = None, value: int = 1):
        key = _series_key(name, labels)
        with self._lock:
            self._track(name, "counter")
            self._counters[key] = self._counters.get(key, 0) + value

    def gauge_set(self, name: str, labels: Labels = None, value: float = 0):
        key = _series_key(name, labels)
        with self._lock:
            self._track(name, "gauge")
            self._gauges[key] = value

    def histogram_observe(self, name: str, labels: Labels = None, value: float = 0):
        """Record an observation for a summary series."""
        key = _series_key(name, labels)
        with self._lock:
            self._track(name, "summary")
            samples = self._summaries.get(key)
            if samples is None:
                samples = self._summaries[key] = deque(maxlen=self.window)
            samples.append(value)

    def counter_value(self, name: str, labels: Labels = None) -> int:
        with self._lock:
            return self._counters.get(_series_key(name, labels), 0)

    def gauge_value(self, name: str, labels: Labels = None) -> Optional[float]:
        with self._lock:
            return self._gauges.get(_series_key(name, labels))

    def export_prometheus(self) -> str:
        """Export metrics in Prometheus text format, one HELP/TYPE block per family."""
        with self._lock:
            series: Dict[str, list] = {}
            for key, value in self._counters.items():
                series.setdefault(key[0], []).append(f"{_render(key)} {value}")
            for key, value in self._gauges.items():
                series.setdefault(key[0], []).append(f"{_render(key)} {value}")
            for key, samples in self._summaries.items():
                if samples:
                    series.setdefault(key[0], []).extend([
                        f"{_render(key, '_sum')} {sum(samples)}",
                        f"{_render(key, '_count')} {len(samples)}",
                    ])

            lines = []
            for name in sorted(series):
                family = self._families[name]
                if family.help:
                    lines.append(f"# HELP {name} {family.help}")
                lines.append(f"# TYPE {name} {family.kind}")
                lines.extend(series[name])

        return "\n".join(lines)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "counters": {_render(k): v for k, v in self._counters.items()},
                "gauges": {_render(k): v for k, v in self._gauges.items()},
                "summaries": {
                    _render(k): {"count": len(s), "sum": sum(s)} for k, s in self._summaries.items()
                },
                "uptime_seconds": time.time() - self._start_time,
            }

    def reset(self):
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._summaries.clear()
            self._families.clear()


# Global metrics instance
_metrics = PrometheusMetrics()


def get_metrics() -> PrometheusMetrics:
    """Get the global metrics instance."""
    return _metrics


__all__ = ["MetricFamily", "FAMILIES", "PrometheusMetrics", "get_metrics"]
