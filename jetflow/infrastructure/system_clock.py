"""System clock implementation using Python's time and datetime."""

import time
from datetime import UTC, datetime

from ..ports.clock import ClockPort


class SystemClock(ClockPort):
    """Default clock implementation using system time.

    Deadlines are measured with ``time.monotonic`` so wall clock jumps
    never shorten or stretch a fetch.
    """

    def monotonic(self) -> float:
        """Get the monotonic clock reading in seconds."""
        return time.monotonic()

    def now(self) -> datetime:
        """Get the current UTC time.

        Returns:
            The current time as a timezone-aware datetime in UTC.
        """
        return datetime.now(UTC)
