"""In-memory metrics implementation following hexagonal architecture.

Counters are bumped from the transport's delivery thread and from
application threads at the same time, so every access holds a lock.
"""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from typing import Any

from ..ports.metrics import MetricsPort


class MetricsSummary:
    """Summary statistics for a metric."""

    def __init__(self):
        """Initialize metrics summary."""
        self.count: int = 0
        self.total: float = 0.0
        self.min: float = float("inf")
        self.max: float = float("-inf")
        self.values: list[float] = []

    def add(self, value: float) -> None:
        """Add a value to the summary."""
        self.count += 1
        self.total += value
        self.min = min(self.min, value)
        self.max = max(self.max, value)
        self.values.append(value)

    @property
    def average(self) -> float:
        """Calculate average value."""
        return self.total / self.count if self.count > 0 else 0.0

    def percentile(self, p: float) -> float:
        """Calculate percentile (0-100)."""
        if not self.values:
            return 0.0
        sorted_values = sorted(self.values)
        index = int((p / 100) * len(sorted_values))
        return sorted_values[min(index, len(sorted_values) - 1)]

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary format."""
        return {
            "count": self.count,
            "average": round(self.average, 2),
            "min": round(self.min, 2) if self.count > 0 else 0,
            "max": round(self.max, 2) if self.count > 0 else 0,
            "p50": round(self.percentile(50), 2),
            "p99": round(self.percentile(99), 2),
        }


class InMemoryMetrics(MetricsPort):
    """Thread-safe in-memory implementation of the MetricsPort."""

    def __init__(self):
        """Initialize in-memory metrics collector."""
        self._lock = threading.Lock()
        self._counters: dict[str, int] = defaultdict(int)
        self._gauges: dict[str, float] = {}
        self._summaries: dict[str, MetricsSummary] = defaultdict(MetricsSummary)
        self._start_time = time.monotonic()

    def increment(self, name: str, value: int = 1) -> None:
        """Increment a counter metric."""
        with self._lock:
            self._counters[name] += value

    def gauge(self, name: str, value: float) -> None:
        """Set a gauge metric."""
        with self._lock:
            self._gauges[name] = value

    def record(self, name: str, value: float) -> None:
        """Record a value for summary statistics."""
        with self._lock:
            self._summaries[name].add(value)

    @contextmanager
    def timer(self, name: str):
        """Context manager recording the duration of its block in milliseconds."""
        start = time.monotonic()
        try:
            yield
        finally:
            self.record(name, (time.monotonic() - start) * 1000)

    def counter(self, name: str) -> int:
        """Current value of a counter (0 when never incremented)."""
        with self._lock:
            return self._counters.get(name, 0)

    def get_all(self) -> dict[str, Any]:
        """Get all metrics as a dictionary."""
        with self._lock:
            return {
                "uptime_seconds": round(time.monotonic() - self._start_time, 2),
                "counters": dict(self._counters),
                "gauges": dict(self._gauges),
                "summaries": {name: s.to_dict() for name, s in self._summaries.items()},
            }

    def reset(self) -> None:
        """Reset all metrics."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._summaries.clear()
