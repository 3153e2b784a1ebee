"""Inbound dispatch: route every received frame to its delivery queues."""

from __future__ import annotations

from ..domain.exceptions import SerializationError, SlowConsumerError
from ..domain.models import InboundMessage
from ..domain.status import decode_envelope
from ..domain.subject_matcher import SubjectMatcher
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from .delivery_queue import DeliveryQueue


class Dispatcher:
    """Subject router installed as a transport's message handler.

    Frames are decoded once into a data or control envelope, matched
    against the registered patterns and pushed into every matching queue.
    A full queue drops the frame for that queue only.
    """

    def __init__(
        self,
        matcher: SubjectMatcher | None = None,
        logger: LoggerPort | None = None,
        metrics: MetricsPort | None = None,
    ):
        self._matcher = matcher or SubjectMatcher()
        self._logger = logger
        self._metrics = metrics

    @property
    def matcher(self) -> SubjectMatcher:
        return self._matcher

    def register(self, pattern: str, queue: DeliveryQueue) -> None:
        """Deliver frames matching ``pattern`` into ``queue``."""
        self._matcher.insert(pattern, queue)
        if self._metrics:
            self._metrics.gauge("dispatch.registrations", self._matcher.count())

    def deregister(self, pattern: str, queue: DeliveryQueue) -> None:
        """Stop delivering ``pattern`` into ``queue`` (no-op when absent)."""
        self._matcher.remove(pattern, queue)
        if self._metrics:
            self._metrics.gauge("dispatch.registrations", self._matcher.count())

    def dispatch(self, inbound: InboundMessage) -> int:
        """Push a frame into every matching queue.

        Never raises; dropped and undecodable frames are logged and counted.

        Returns:
            Number of queues the frame was delivered to.
        """
        queues = self._matcher.match(inbound.subject)
        if not queues:
            if self._metrics:
                self._metrics.increment("dispatch.unmatched")
            return 0

        try:
            envelope = decode_envelope(inbound)
        except SerializationError as e:
            if self._logger:
                self._logger.error(
                    "Dropping undecodable frame", subject=inbound.subject, error=str(e)
                )
            if self._metrics:
                self._metrics.increment("dispatch.decode_error")
            return 0

        delivered = 0
        for queue in queues:
            try:
                queue.push(envelope)
                delivered += 1
            except SlowConsumerError as e:
                if self._logger:
                    self._logger.warning(
                        "Slow consumer, dropping message",
                        subject=inbound.subject,
                        pending_msgs=e.pending_msgs,
                        pending_bytes=e.pending_bytes,
                    )
                if self._metrics:
                    self._metrics.increment("dispatch.slow_consumer")

        if self._metrics and delivered:
            self._metrics.increment("dispatch.delivered", delivered)
        return delivered

    __call__ = dispatch
