"""JetFlow - Thread-safe NATS JetStream pull-consumer engine."""

from .application.jetstream import JetStreamContext
from .application.message import JetStreamMessage
from .application.pull_subscription import PullSubscription
from .application.stream_manager import JetStreamManager, JetStreamOptions
from .domain.subject_matcher import SubjectMatcher
from .infrastructure.config import NATSConnectionConfig
from .infrastructure.nats_transport import NATSTransport

__all__ = [
    "JetStreamContext",
    "JetStreamManager",
    "JetStreamMessage",
    "JetStreamOptions",
    "NATSConnectionConfig",
    "NATSTransport",
    "PullSubscription",
    "SubjectMatcher",
]
__version__ = "0.1.0"
