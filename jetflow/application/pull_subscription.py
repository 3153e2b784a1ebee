"""Pull subscription: batched, deadline-bounded fetches from a pull consumer.

A pull subscription listens on a private inbox. Each fetch publishes a
pull request to the consumer's next-message subject with the inbox as
reply, then drains the inbox's delivery queue. Besides data, the server
answers with two status sentinels that are never handed to the caller:

- ``404 No Messages`` when a no-wait request found nothing pending.
- ``408 Request Timeout`` when a request's expiry ran out.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..domain.enums import StatusKind
from ..domain.exceptions import FetchTimeoutError, JetFlowError, ValidationError
from ..domain.models import DataMessage, Envelope, PullRequest
from ..domain.patterns import SubjectPatterns
from ..domain.status import classify, error_from_control
from ..ports.clock import ClockPort
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from ..ports.transport import TransportPort
from .delivery_queue import DeliveryQueue
from .message import JetStreamMessage

if TYPE_CHECKING:
    from ..domain.api_models import ConsumerInfo
    from .dispatcher import Dispatcher
    from .stream_manager import JetStreamManager

DEFAULT_FETCH_TIMEOUT = 5.0
NANOSECOND = 1_000_000_000
# Pull requests expire slightly before the client gives up on them
EXPIRES_MARGIN_NS = 100_000


class PullSubscription:
    """Subscription bound to a durable pull consumer."""

    def __init__(
        self,
        transport: TransportPort,
        dispatcher: Dispatcher,
        queue: DeliveryQueue,
        inbox: str,
        stream: str,
        consumer: str,
        manager: JetStreamManager,
        clock: ClockPort,
        logger: LoggerPort | None = None,
        metrics: MetricsPort | None = None,
    ):
        self._transport = transport
        self._dispatcher = dispatcher
        self._queue = queue
        self._inbox = inbox
        self._stream = stream
        self._consumer = consumer
        self._manager = manager
        self._clock = clock
        self._logger = logger
        self._metrics = metrics
        self._next_subject = SubjectPatterns.consumer_next(manager.prefix, stream, consumer)
        self._closed = False

    def __enter__(self) -> PullSubscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()

    def __repr__(self) -> str:
        return f"<PullSubscription stream={self._stream!r} consumer={self._consumer!r} inbox={self._inbox!r}>"

    @property
    def subject(self) -> str:
        """Inbox the consumer delivers to."""
        return self._inbox

    @property
    def stream(self) -> str:
        return self._stream

    @property
    def consumer(self) -> str:
        return self._consumer

    @property
    def pending_msgs(self) -> int:
        """Envelopes waiting in the delivery queue."""
        return self._queue.size

    @property
    def pending_bytes(self) -> int:
        """Payload bytes waiting in the delivery queue."""
        return self._queue.pending_bytes

    @property
    def is_closed(self) -> bool:
        return self._closed

    def next_msg(self, timeout: float | None = None) -> JetStreamMessage:
        """Not available; pull subscriptions only deliver through ``fetch``."""
        raise JetFlowError("nats: pull subscription cannot use next_msg")

    def consumer_info(self, timeout: float | None = None) -> ConsumerInfo:
        """Fetch the current state of the bound consumer."""
        return self._manager.consumer_info(self._stream, self._consumer, timeout=timeout)

    def unsubscribe(self) -> None:
        """Stop listening on the inbox and drop anything still queued.

        The durable consumer itself is left on the server.
        """
        if self._closed:
            return
        self._closed = True
        self._dispatcher.deregister(self._inbox, self._queue)
        self._transport.unsubscribe(self._inbox)
        self._queue.clear()
        if self._logger:
            self._logger.debug(
                "Pull subscription closed", stream=self._stream, consumer=self._consumer
            )

    def fetch(self, batch: int = 1, timeout: float = DEFAULT_FETCH_TIMEOUT) -> list[JetStreamMessage]:
        """Fetch up to ``batch`` messages within ``timeout`` seconds.

        Args:
            batch: Maximum number of messages to return
            timeout: Seconds to wait for the batch

        Returns:
            Between 1 and ``batch`` messages. Fewer than ``batch`` are
            returned only once the deadline passed, or when enough
            envelopes were already queued that some turned out to be
            sentinels.

        Raises:
            ValidationError: If ``batch`` < 1 or ``timeout`` <= 0.
            FetchTimeoutError: If no message arrived in time.
            APIError: If the server answered with an error status.
        """
        if batch < 1:
            raise ValidationError("nats: invalid batch size")
        if timeout is None or timeout <= 0:
            raise ValidationError("nats: invalid fetch timeout")
        if self._closed:
            raise JetFlowError("nats: subscription is closed")

        start = self._clock.monotonic()
        try:
            if batch == 1:
                msgs = [self._fetch_one(start, timeout)]
            else:
                msgs = self._fetch_batch(batch, start, timeout)
        except FetchTimeoutError:
            if self._metrics:
                self._metrics.increment("fetch.timeouts")
            raise

        if self._metrics:
            self._metrics.increment("fetch.messages", len(msgs))
            self._metrics.record("fetch.duration_ms", (self._clock.monotonic() - start) * 1000)
        return msgs

    # Single message
    def _fetch_one(self, start: float, timeout: float) -> JetStreamMessage:
        with self._queue:
            if not self._queue.empty():
                envelope = self._queue.pop()
                kind = classify(envelope)
                if kind is StatusKind.DATA:
                    return self._wrap(envelope)
                if kind is StatusKind.OTHER:
                    raise error_from_control(envelope)

        self._request(PullRequest(batch=1, expires=self._expires_ns(timeout)))

        while True:
            envelope = self._wait_and_pop(start, timeout)
            if envelope is None:
                raise FetchTimeoutError(batch=1)
            kind = classify(envelope)
            if kind is StatusKind.DATA:
                return self._wrap(envelope)
            if kind is StatusKind.REQUEST_TIMEOUT:
                raise FetchTimeoutError("nats: fetch request timeout", batch=1)
            if kind is StatusKind.OTHER:
                raise error_from_control(envelope)
            # A stale no-messages answer to an earlier request

    # Batch
    def _fetch_batch(self, batch: int, start: float, timeout: float) -> list[JetStreamMessage]:
        msgs: list[JetStreamMessage] = []

        with self._queue:
            if self._queue.size >= batch:
                for _ in range(batch):
                    envelope = self._queue.pop()
                    kind = classify(envelope)
                    if kind is StatusKind.DATA:
                        msgs.append(self._wrap(envelope))
                    elif kind is StatusKind.OTHER:
                        raise error_from_control(envelope)
                return msgs

        self._request(PullRequest(batch=batch, no_wait=True))

        envelope = self._wait_and_pop(start, timeout)
        if envelope is not None:
            kind = classify(envelope)
            if kind is StatusKind.NO_MESSAGES:
                self._request(PullRequest(batch=batch, expires=self._expires_ns(timeout)))
            elif kind is StatusKind.REQUEST_TIMEOUT:
                raise FetchTimeoutError("nats: fetch request timeout", batch=batch)
            elif kind is StatusKind.OTHER:
                raise error_from_control(envelope)
            else:
                msgs.append(self._wrap(envelope))

        while len(msgs) < batch and self._remaining(start, timeout) > 0:
            envelope = self._wait_and_pop(start, timeout)
            if envelope is None:
                break
            kind = classify(envelope)
            if kind is StatusKind.DATA:
                msgs.append(self._wrap(envelope))
            elif kind is StatusKind.OTHER:
                raise error_from_control(envelope)
            elif self._remaining(start, timeout) <= 0:
                break

        if not msgs:
            raise FetchTimeoutError(batch=batch)
        return msgs

    # Helpers
    def _remaining(self, start: float, timeout: float) -> float:
        return timeout - (self._clock.monotonic() - start)

    def _wait_and_pop(self, start: float, timeout: float) -> Envelope | None:
        """Wait for the next envelope until the fetch deadline, or None."""
        with self._queue:
            remaining = self._remaining(start, timeout)
            if self._queue.empty() and remaining > 0:
                self._queue.wait_until_non_empty(remaining)
            if self._queue.empty():
                return None
            return self._queue.pop()

    def _expires_ns(self, timeout: float) -> int:
        return max(int(timeout * NANOSECOND) - EXPIRES_MARGIN_NS, 1)

    def _request(self, request: PullRequest) -> None:
        if self._logger:
            self._logger.debug(
                "Sending pull request",
                subject=self._next_subject,
                batch=request.batch,
                expires=request.expires,
                no_wait=request.no_wait,
            )
        if self._metrics:
            self._metrics.increment("fetch.requests")
        self._transport.publish(self._next_subject, request.to_bytes(), reply=self._inbox)

    def _wrap(self, envelope: DataMessage) -> JetStreamMessage:
        return JetStreamMessage(envelope, self._transport, lock=self._queue.lock)
