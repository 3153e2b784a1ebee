"""Clock port abstraction for time handling.

This module defines the clock abstraction to decouple protocol logic from
system time, making deadline arithmetic easy to test and control.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Abstract clock interface for time operations.

    This port provides two time sources:
    - A monotonic clock for measuring elapsed time and deadlines
    - A timezone-aware wall clock for timestamps
    """

    @abstractmethod
    def monotonic(self) -> float:
        """Get a monotonic time in seconds.

        Returns:
            Seconds from an arbitrary origin. Only differences are meaningful.
        """
        ...

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time as a timezone-aware datetime.

        Note:
            Implementations MUST return timezone-aware datetimes.
            Using UTC is recommended for consistency.
        """
        ...
