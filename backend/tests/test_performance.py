"""
Tests for performance monitoring.
"""
import pytest
import time
from insight_engine.core.performance import PerformanceMonitor, track_performance


def test_performance_monitor_record():
    """Test recording performance metrics."""
    PerformanceMonitor.clear_metrics()

    PerformanceMonitor.record_metric("test_metric", 1.5, {"test": "data"})
    PerformanceMonitor.record_metric("test_metric", 2.0)
    PerformanceMonitor.record_metric("test_metric", 0.5)

    stats = PerformanceMonitor.get_stats("test_metric")

    assert stats is not None
    assert stats["count"] == 3
    assert stats["min"] == 0.5
    assert stats["max"] == 2.0
    assert stats["mean"] == pytest.approx(1.333, rel=0.01)
    assert stats["p50"] == 1.5


def test_performance_decorator_sync():
    """Test performance tracking decorator on sync function."""
    PerformanceMonitor.clear_metrics()

    @track_performance("test_function")
    def test_func(x: int) -> int:
        time.sleep(0.01)  # Small delay to measure
        return x * 2

    result = test_func(5)

    assert result == 10

    stats = PerformanceMonitor.get_stats("test_function")
    assert stats is not None
    assert stats["count"] == 1
    assert stats["mean"] > 0


def test_performance_decorator_records_failures():
    """Failures are recorded and the exception propagates."""
    PerformanceMonitor.clear_metrics()

    @track_performance("failing_function")
    def failing():
        raise ValueError("boom")

    with pytest.raises(ValueError):
        failing()

    stats = PerformanceMonitor.get_stats("failing_function")
    assert stats is not None
    assert stats["count"] == 1


def test_analysis_is_tracked():
    """The full analysis records its duration."""
    from insight_engine.services.analyzer import run_full_analysis

    PerformanceMonitor.clear_metrics()
    run_full_analysis({"fields": ["a"], "rows": [{"a": 1}, {"a": 2}]})

    assert "run_full_analysis" in PerformanceMonitor.get_all_metrics()


def test_performance_monitor_clear():
    """Test clearing metrics."""
    PerformanceMonitor.record_metric("test", 1.0)
    assert PerformanceMonitor.get_stats("test") is not None

    PerformanceMonitor.clear_metrics()
    assert PerformanceMonitor.get_stats("test") is None


def test_measure_keeps_metadata():
    """Test measure keeps metadata."""
    from insight_engine.core.performance import measure

    PerformanceMonitor.clear_metrics()

    with measure("report_export", session_id="s-1"):
        pass

    assert PerformanceMonitor.get_stats("report_export")["count"] == 1
