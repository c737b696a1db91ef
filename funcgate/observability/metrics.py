"""
In-memory metrics collection.

Counters and timings recorded by the pipeline middleware, keyed by
metric name and a tag string. Timings keep running aggregates plus a
bounded window of recent samples for percentiles, so memory stays flat
however long the gateway runs.
"""

import time
from collections import defaultdict, deque
from threading import Lock
from typing import Any, Deque, Dict, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_MAX_SAMPLES = 1024


class TimingSeries:
    """Aggregates for one metric/tag pair; percentiles come from the recent window."""

    def __init__(self, max_samples: int):
        self.count = 0
        self.total = 0.0
        self.min: Optional[float] = None
        self.max: Optional[float] = None
        self.samples: Deque[float] = deque(maxlen=max_samples)

    def add(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.min = value if self.min is None else min(self.min, value)
        self.max = value if self.max is None else max(self.max, value)
        self.samples.append(value)

    def summary(self) -> Dict[str, float]:
        window = sorted(self.samples)
        n = len(window)
        return {
            'count': self.count,
            'min': self.min,
            'max': self.max,
            'avg': self.total / self.count,
            'p50': window[int(n * 0.5)],
            'p95': window[min(int(n * 0.95), n - 1)]
        }


class MetricsCollector:
    """
    Thread-safe in-memory collector for counters and timings.

    Example:
        metrics.increment('http_requests_total', tags={'status': '200'})
        with metrics.timer('openapi_render_ms'):
            render_document(document, fmt)
    """

    def __init__(self, max_samples: int = DEFAULT_MAX_SAMPLES):
        if max_samples < 1:
            raise ValueError("max_samples must be at least 1")
        self.max_samples = max_samples
        self._counters: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._timings: Dict[str, Dict[str, TimingSeries]] = defaultdict(dict)
        self._lock = Lock()

    def increment(self, metric_name: str, value: int = 1, tags: Optional[Dict[str, str]] = None):
        """
        Increment a counter metric.

        Args:
            metric_name: Name of the metric (e.g., 'handler_faults_total')
            value: Amount to increment by (default: 1)
            tags: Optional tags for metric dimensions
        """
        tag_key = self._make_tag_key(tags)
        with self._lock:
            self._counters[metric_name][tag_key] += value

    def timing(self, metric_name: str, duration_ms: float, tags: Optional[Dict[str, str]] = None):
        """Record a timing metric in milliseconds."""
        tag_key = self._make_tag_key(tags)
        with self._lock:
            series = self._timings[metric_name].get(tag_key)
            if series is None:
                series = self._timings[metric_name][tag_key] = TimingSeries(self.max_samples)
            series.add(duration_ms)

    def timer(self, metric_name: str, tags: Optional[Dict[str, str]] = None) -> 'Timer':
        """Context manager recording the elapsed time of its block."""
        return Timer(self, metric_name, tags)

    def get_counter(self, metric_name: str, tags: Optional[Dict[str, str]] = None) -> int:
        with self._lock:
            return self._counters.get(metric_name, {}).get(self._make_tag_key(tags), 0)

    def sample_count(self, metric_name: str, tags: Optional[Dict[str, str]] = None) -> int:
        """Number of timing samples currently retained for percentiles."""
        with self._lock:
            series = self._timings.get(metric_name, {}).get(self._make_tag_key(tags))
            return len(series.samples) if series else 0

    def get_summary(self) -> Dict[str, Any]:
        """
        Snapshot of everything collected.

        Returns:
            {'counters': {name: {tags: value}},
             'timings': {name: {tags: {count, min, max, avg, p50, p95}}}}
        """
        with self._lock:
            return {
                'counters': {name: dict(values) for name, values in self._counters.items()},
                'timings': {
                    name: {tag_key: series.summary() for tag_key, series in values.items()}
                    for name, values in self._timings.items()
                }
            }

    def reset(self):
        with self._lock:
            self._counters.clear()
            self._timings.clear()
        logger.debug("Metrics reset")

    def _make_tag_key(self, tags: Optional[Dict[str, str]]) -> str:
        if not tags:
            return 'default'
        return ','.join(f"{k}={v}" for k, v in sorted(tags.items()))


class Timer:
    """Context manager for timing operations."""

    def __init__(self, collector: MetricsCollector, metric_name: str, tags: Optional[Dict[str, str]] = None):
        self.collector = collector
        self.metric_name = metric_name
        self.tags = tags
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            duration_ms = (time.perf_counter() - self.start_time) * 1000
            self.collector.timing(self.metric_name, duration_ms, self.tags)


# Global metrics instance
metrics = MetricsCollector()
