"""JetStream context: publishing to streams and binding pull consumers."""

from __future__ import annotations

from ..domain.api_models import ConsumerConfig, PubAck
from ..domain.enums import Header
from ..domain.exceptions import (
    InvalidDurableNameError,
    NoRespondersError,
    NoStreamResponseError,
    NotFoundError,
    SerializationError,
)
from ..domain.status import error_from_api
from ..infrastructure.serialization import deserialize_dict
from ..ports.clock import ClockPort
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from ..ports.transport import TransportPort
from .delivery_queue import DeliveryQueue, SubscriptionLimits
from .dispatcher import Dispatcher
from .pull_subscription import PullSubscription
from .stream_manager import JetStreamManager, JetStreamOptions


class JetStreamContext(JetStreamManager):
    """Entry point to JetStream over a connected transport.

    Installs a ``Dispatcher`` as the transport's message handler, so every
    subscription created through this context shares one subject router.

    Example:
        >>> js = JetStreamContext(transport, clock=SystemClock())
        >>> js.publish("orders.created", b"{}")
        >>> with js.pull_subscribe("orders.*", durable="worker") as sub:
        ...     for msg in sub.fetch(10, timeout=1.0):
        ...         msg.ack()
    """

    def __init__(
        self,
        transport: TransportPort,
        clock: ClockPort,
        options: JetStreamOptions | None = None,
        dispatcher: Dispatcher | None = None,
        logger: LoggerPort | None = None,
        metrics: MetricsPort | None = None,
    ):
        super().__init__(transport, options, logger)
        self._clock = clock
        self._metrics = metrics
        self._dispatcher = dispatcher or Dispatcher(logger=logger, metrics=metrics)
        transport.set_message_handler(self._dispatcher)

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def publish(
        self,
        subject: str,
        payload: bytes = b"",
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        stream: str | None = None,
        msg_id: str | None = None,
    ) -> PubAck:
        """Publish to a stream and wait for it to store the message.

        Args:
            subject: Subject the stream listens on
            payload: Message payload
            timeout: Seconds to wait for the acknowledgment
            headers: Extra message headers
            stream: Expected stream; the server rejects the message otherwise
            msg_id: Id used by the stream to drop duplicates

        Raises:
            NoStreamResponseError: If no stream listens on the subject.
            APIError: If the stream rejected the message.
        """
        hdrs = dict(headers or {})
        if stream:
            hdrs[Header.EXPECTED_STREAM.value] = stream
        if msg_id:
            hdrs[Header.MSG_ID.value] = msg_id

        try:
            response = self._transport.request(
                subject, payload, timeout=timeout or self.timeout, headers=hdrs or None
            )
        except NoRespondersError as e:
            raise NoStreamResponseError(subject) from e

        result = deserialize_dict(response.data)
        error = result.get("error")
        if error:
            raise error_from_api(error)
        try:
            ack = PubAck.model_validate(result)
        except ValueError as e:
            raise SerializationError(f"Invalid PubAck response: {e}") from e
        if self._metrics:
            self._metrics.increment("publish.acked")
        return ack

    def pull_subscribe(
        self,
        subject: str,
        durable: str | None,
        stream: str | None = None,
        consumer: str | None = None,
        config: ConsumerConfig | None = None,
        limits: SubscriptionLimits | None = None,
        timeout: float | None = None,
    ) -> PullSubscription:
        """Bind a pull subscription to a durable consumer.

        The stream is looked up by subject unless given. The consumer is
        created when it does not exist yet, except when binding to an
        explicitly named stream, where a missing consumer is an error.

        Raises:
            InvalidDurableNameError: If neither durable nor consumer is given.
            NotFoundError: If the stream or bound consumer does not exist.
        """
        consumer_name = consumer or durable
        if not consumer_name:
            raise InvalidDurableNameError()

        stream_name = stream or self.find_stream_name_by_subject(subject, timeout=timeout)

        try:
            self.consumer_info(stream_name, consumer_name, timeout=timeout)
        except NotFoundError:
            if stream:
                raise
            consumer_config = config or ConsumerConfig()
            consumer_config = consumer_config.model_copy(
                update={
                    "durable_name": consumer_name,
                    "filter_subject": consumer_config.filter_subject or subject,
                }
            )
            self.add_consumer(stream_name, consumer_config, timeout=timeout)
            if self._logger:
                self._logger.info(
                    "Created pull consumer", stream=stream_name, consumer=consumer_name
                )

        inbox = self._transport.new_inbox()
        queue = DeliveryQueue(limits)
        self._dispatcher.register(inbox, queue)
        try:
            self._transport.subscribe(inbox)
        except Exception:
            self._dispatcher.deregister(inbox, queue)
            raise

        if self._logger:
            self._logger.debug(
                "Pull subscription bound", stream=stream_name, consumer=consumer_name, inbox=inbox
            )
        return PullSubscription(
            transport=self._transport,
            dispatcher=self._dispatcher,
            queue=queue,
            inbox=inbox,
            stream=stream_name,
            consumer=consumer_name,
            manager=self,
            clock=self._clock,
            logger=self._logger,
            metrics=self._metrics,
        )
