"""Metrics port - Abstract interface for metrics collection.

This port lets the dispatch and fetch layers record activity without
depending on a specific metrics backend.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any


class MetricsPort(ABC):
    """Abstract interface for metrics collection."""

    @abstractmethod
    def increment(self, name: str, value: int = 1) -> None:
        """Increment a counter metric.

        Args:
            name: The metric name (e.g., "fetch.messages")
            value: The increment value (default: 1)
        """
        ...

    @abstractmethod
    def gauge(self, name: str, value: float) -> None:
        """Set a gauge metric.

        Args:
            name: The metric name (e.g., "dispatch.queues")
            value: The gauge value
        """
        ...

    @abstractmethod
    def record(self, name: str, value: float) -> None:
        """Record a value for summary statistics.

        Args:
            name: The metric name (e.g., "fetch.batch_size")
            value: The value to record
        """
        ...

    @abstractmethod
    def timer(self, name: str) -> AbstractContextManager[Any]:
        """Create a context manager for timing operations.

        Args:
            name: The metric name for the timer

        Returns:
            A context manager that records the operation duration
        """
        ...

    @abstractmethod
    def get_all(self) -> dict[str, Any]:
        """Get all metrics as a dictionary."""
        ...

    @abstractmethod
    def reset(self) -> None:
        """Reset all metrics."""
        ...
