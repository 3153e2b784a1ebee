"""Tests for the SystemClock implementation."""

from datetime import UTC, datetime

from jetflow.infrastructure.system_clock import SystemClock
from jetflow.ports.clock import ClockPort


class TestSystemClock:
    """Test the SystemClock implementation."""

    def test_implements_clock_port(self):
        """Test that SystemClock implements ClockPort interface."""
        assert isinstance(SystemClock(), ClockPort)

    def test_returns_current_time(self):
        """Test that now() returns current UTC time."""
        clock = SystemClock()

        before = datetime.now(UTC)
        clock_time = clock.now()
        after = datetime.now(UTC)

        assert before <= clock_time <= after
        assert clock_time.tzinfo == UTC

    def test_monotonic_never_goes_back(self):
        """Test that the monotonic reading is non-decreasing."""
        clock = SystemClock()
        readings = [clock.monotonic() for _ in range(100)]

        assert readings == sorted(readings)
