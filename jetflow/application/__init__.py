"""Application layer - Delivery, fetch and acknowledgment protocols."""

from .delivery_queue import DeliveryQueue, SubscriptionLimits
from .dispatcher import Dispatcher
from .jetstream import JetStreamContext
from .message import JetStreamMessage
from .pull_subscription import PullSubscription
from .stream_manager import JetStreamManager, JetStreamOptions

__all__ = [
    "DeliveryQueue",
    "Dispatcher",
    "JetStreamContext",
    "JetStreamManager",
    "JetStreamMessage",
    "JetStreamOptions",
    "PullSubscription",
    "SubscriptionLimits",
]
