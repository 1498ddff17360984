"""
Timing of analysis and report rendering.

Durations are kept in memory per metric name, bounded to the most recent
samples, and summarized on demand.
"""
import logging
import threading
import time
from collections import defaultdict, deque
from contextlib import contextmanager
from functools import wraps
from typing import Any, Deque, Dict, Iterator, Optional

import numpy as np

logger = logging.getLogger(__name__)

MAX_SAMPLES_PER_METRIC = 1000


class PerformanceMonitor:
    """Process-wide store of timing samples."""

    _lock = threading.Lock()
    _samples: Dict[str, Deque[Dict[str, Any]]] = defaultdict(lambda: deque(maxlen=MAX_SAMPLES_PER_METRIC))

    @classmethod
    def record_metric(cls, name: str, value: float, metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Record one sample.

        Args:
            name: Metric name, e.g. 'run_full_analysis' or 'render_report_html'
            value: Duration in seconds
            metadata: Optional context such as status or session id
        """
        with cls._lock:
            cls._samples[name].append({
                'value': value,
                'timestamp': time.time(),
                'metadata': metadata or {},
            })

    @classmethod
    def _summarize(cls, name: str) -> Optional[Dict[str, float]]:
        samples = cls._samples.get(name)
        if not samples:
            return None

        values = np.sort(np.array([s['value'] for s in samples], dtype=float))
        n = len(values)
        return {
            'count': n,
            'min': float(values[0]),
            'max': float(values[-1]),
            'mean': float(values.mean()),
            'p50': float(values[n // 2]),
            'p95': float(values[int(n * 0.95)]),
            'p99': float(values[int(n * 0.99)]),
        }

    @classmethod
    def get_stats(cls, name: str) -> Optional[Dict[str, float]]:
        """Count, min, max, mean and nearest-rank percentiles; None if never recorded."""
        with cls._lock:
            return cls._summarize(name)

    @classmethod
    def get_all_metrics(cls) -> Dict[str, Dict[str, float]]:
        with cls._lock:
            return {name: cls._summarize(name) for name in list(cls._samples)}

    @classmethod
    def clear_metrics(cls) -> None:
        with cls._lock:
            cls._samples.clear()


@contextmanager
def measure(name: str, **metadata: Any) -> Iterator[None]:
    """Time the enclosed block and record it under ``name`` with its outcome."""
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        duration = time.perf_counter() - start
        PerformanceMonitor.record_metric(name, duration, {**metadata, 'status': 'error', 'error': str(e)})
        logger.error(
            f"{name} failed after {duration:.3f}s: {e}",
            extra={'metric': name, 'duration': duration}
        )
        raise

    duration = time.perf_counter() - start
    PerformanceMonitor.record_metric(name, duration, {**metadata, 'status': 'success'})
    logger.debug(
        f"{name} completed in {duration:.3f}s",
        extra={'metric': name, 'duration': duration}
    )


def track_performance(metric_name: str):
    """
    Decorator form of ``measure``.

    Usage:
        @track_performance("run_full_analysis")
        def run_full_analysis(...):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            with measure(metric_name):
                return func(*args, **kwargs)

        return wrapper

    return decorator
