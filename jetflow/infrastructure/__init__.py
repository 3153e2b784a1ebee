"""Infrastructure layer - Adapters for NATS, time, logging and metrics."""

from .config import LogContext, NATSConnectionConfig
from .in_memory_metrics import InMemoryMetrics
from .in_memory_transport import InMemoryTransport, reply_to
from .nats_transport import NATSTransport
from .simple_logger import SimpleLogger
from .system_clock import SystemClock

__all__ = [
    "InMemoryMetrics",
    "InMemoryTransport",
    "LogContext",
    "NATSConnectionConfig",
    "NATSTransport",
    "SimpleLogger",
    "SystemClock",
    "reply_to",
]
