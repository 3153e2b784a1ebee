"""Bounded delivery queue shared by the transport and the fetch loop.

The transport's delivery thread pushes envelopes while application threads
pop them. All state is guarded by one reentrant lock exposed through
``lock`` and the context manager protocol, so callers can check and pop
atomically.
"""

from __future__ import annotations

import threading
import time
from collections import deque

from pydantic import BaseModel, ConfigDict, Field

from ..domain.exceptions import SlowConsumerError
from ..domain.models import Envelope

DEFAULT_PENDING_MSGS_LIMIT = 65536
DEFAULT_PENDING_BYTES_LIMIT = 65536 * 1024


class SubscriptionLimits(BaseModel):
    """Pending limits of a subscription's delivery queue."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        strict=True,
        validate_assignment=True,
    )

    pending_msgs_limit: int = Field(
        default=DEFAULT_PENDING_MSGS_LIMIT,
        gt=0,
        description="Maximum number of queued messages",
    )
    pending_bytes_limit: int = Field(
        default=DEFAULT_PENDING_BYTES_LIMIT,
        gt=0,
        description="Maximum number of queued payload bytes",
    )


class DeliveryQueue:
    """FIFO of envelopes with message and byte limits.

    Example:
        >>> queue = DeliveryQueue()
        >>> queue.push(DataMessage(subject="a", payload=b"x"))
        >>> with queue:
        ...     if not queue.empty():
        ...         item = queue.pop()
    """

    def __init__(self, limits: SubscriptionLimits | None = None):
        self._limits = limits or SubscriptionLimits()
        self._items: deque[Envelope] = deque()
        self._pending_bytes = 0
        self._lock = threading.RLock()
        self._not_empty = threading.Condition(self._lock)

    @property
    def lock(self) -> threading.RLock:
        """The queue's reentrant lock."""
        return self._lock

    def __enter__(self) -> DeliveryQueue:
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._lock.release()

    @property
    def limits(self) -> SubscriptionLimits:
        return self._limits

    def push(self, envelope: Envelope) -> None:
        """Append an envelope and wake one waiter.

        Raises:
            SlowConsumerError: If either limit is already reached; the
                envelope is not enqueued.
        """
        with self._lock:
            if (
                len(self._items) >= self._limits.pending_msgs_limit
                or self._pending_bytes >= self._limits.pending_bytes_limit
            ):
                raise SlowConsumerError(len(self._items), self._pending_bytes)
            self._items.append(envelope)
            self._pending_bytes += envelope.size
            self._not_empty.notify()

    def pop(self) -> Envelope:
        """Remove and return the oldest envelope.

        Raises:
            IndexError: If the queue is empty.
        """
        with self._lock:
            envelope = self._items.popleft()
            self._pending_bytes -= envelope.size
            return envelope

    def empty(self) -> bool:
        with self._lock:
            return not self._items

    @property
    def size(self) -> int:
        """Number of queued envelopes."""
        with self._lock:
            return len(self._items)

    def __len__(self) -> int:
        return self.size

    @property
    def pending_bytes(self) -> int:
        """Total payload bytes of queued envelopes."""
        with self._lock:
            return self._pending_bytes

    def clear(self) -> None:
        """Drop everything queued."""
        with self._lock:
            self._items.clear()
            self._pending_bytes = 0

    def wait_until_non_empty(self, timeout: float) -> bool:
        """Block until an envelope is queued or ``timeout`` seconds pass.

        The lock is released while parked. Spurious wakeups are absorbed.
        A timeout of zero or less only checks the queue.

        Returns:
            True if an envelope is available.
        """
        with self._lock:
            deadline = time.monotonic() + timeout
            while not self._items:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._not_empty.wait(remaining)
            return True
