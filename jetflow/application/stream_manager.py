"""JetStream management API: streams, consumers and stored messages.

Every call is a request to a ``$JS.API`` subject answered with a JSON
document. Error bodies of the form ``{"error": {...}}`` are mapped to the
typed ``APIError`` hierarchy.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from ..domain.api_models import (
    AccountInfo,
    ConsumerConfig,
    ConsumerInfo,
    RawStreamMsg,
    StreamConfig,
    StreamInfo,
)
from ..domain.enums import StatusCode
from ..domain.exceptions import (
    InvalidConsumerNameError,
    InvalidStreamNameError,
    NoRespondersError,
    NotFoundError,
    SerializationError,
    ServiceUnavailableError,
    ValidationError,
)
from ..domain.models import ControlMessage, InboundMessage
from ..domain.patterns import SubjectPatterns
from ..domain.status import decode_envelope, error_from_api, error_from_control
from ..infrastructure.serialization import deserialize_dict, serialize_dict
from ..ports.logger import LoggerPort
from ..ports.transport import TransportPort

T = TypeVar("T", bound=BaseModel)

DEFAULT_API_TIMEOUT = 5.0


class JetStreamOptions(BaseModel):
    """Options shared by the JetStream context and manager."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        strict=True,
        validate_assignment=True,
    )

    prefix: str | None = Field(default=None, description="Explicit API prefix")
    domain: str | None = Field(default=None, description="JetStream domain")
    timeout: float = Field(default=DEFAULT_API_TIMEOUT, gt=0, description="API request timeout")

    @property
    def api_prefix(self) -> str:
        """The explicit prefix, or one derived from the domain."""
        if self.prefix:
            return self.prefix.rstrip(".")
        return SubjectPatterns.api_prefix(self.domain)


def _decode(model: type[T], data: dict[str, Any]) -> T:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise SerializationError(f"Invalid {model.__name__} response: {e}") from e


def _require_stream(name: str | None) -> str:
    if not name:
        raise InvalidStreamNameError()
    return name


def _require_consumer(name: str | None) -> str:
    if not name:
        raise InvalidConsumerNameError()
    return name


class JetStreamManager:
    """Client for the JetStream management API."""

    def __init__(
        self,
        transport: TransportPort,
        options: JetStreamOptions | None = None,
        logger: LoggerPort | None = None,
    ):
        self._transport = transport
        self._options = options or JetStreamOptions()
        self._logger = logger

    @property
    def prefix(self) -> str:
        return self._options.api_prefix

    @property
    def timeout(self) -> float:
        return self._options.timeout

    # Requests
    def _request(
        self, subject: str, payload: bytes = b"", timeout: float | None = None
    ) -> InboundMessage:
        try:
            return self._transport.request(subject, payload, timeout=timeout or self.timeout)
        except NoRespondersError as e:
            raise ServiceUnavailableError("JetStream not enabled or unavailable", code=503) from e

    def api_request(
        self, subject: str, payload: dict[str, Any] | None = None, timeout: float | None = None
    ) -> dict[str, Any]:
        """Send an API request and decode its JSON answer.

        Raises:
            ServiceUnavailableError: If nothing answers on the subject.
            APIError: If the answer is an error document.
        """
        data = serialize_dict(payload) if payload is not None else b""
        if self._logger:
            self._logger.debug("JetStream API request", subject=subject)
        response = self._request(subject, data, timeout)
        result = deserialize_dict(response.data)
        error = result.get("error")
        if error:
            raise error_from_api(error)
        return result

    # Streams
    def add_stream(self, config: StreamConfig, timeout: float | None = None) -> StreamInfo:
        """Create a stream.

        Raises:
            InvalidStreamNameError: If the name is missing or contains
                whitespace, '.', '>' or '*'.
        """
        name = self._validate_stream_config(config)
        result = self.api_request(
            SubjectPatterns.stream_create(self.prefix, name), config.to_wire(), timeout
        )
        return _decode(StreamInfo, result)

    def update_stream(self, config: StreamConfig, timeout: float | None = None) -> StreamInfo:
        """Update the configuration of an existing stream."""
        name = self._validate_stream_config(config)
        result = self.api_request(
            SubjectPatterns.stream_update(self.prefix, name), config.to_wire(), timeout
        )
        return _decode(StreamInfo, result)

    def _validate_stream_config(self, config: StreamConfig) -> str:
        if not config.name:
            raise InvalidStreamNameError("nats: stream name is required")
        if not SubjectPatterns.is_valid_stream_name(config.name):
            raise InvalidStreamNameError(
                "nats: spaces, tabs, period (.), greater than (>) or asterisk (*) "
                "are prohibited in stream names"
            )
        return config.name

    def stream_info(self, name: str, timeout: float | None = None) -> StreamInfo:
        """Fetch the configuration and state of a stream."""
        subject = SubjectPatterns.stream_info(self.prefix, _require_stream(name))
        return _decode(StreamInfo, self.api_request(subject, timeout=timeout))

    def delete_stream(self, name: str, timeout: float | None = None) -> bool:
        """Delete a stream and everything stored in it."""
        subject = SubjectPatterns.stream_delete(self.prefix, _require_stream(name))
        return bool(self.api_request(subject, timeout=timeout).get("success"))

    def find_stream_name_by_subject(self, subject: str, timeout: float | None = None) -> str:
        """Look up the stream a subject is stored in.

        Raises:
            NotFoundError: If no stream listens on the subject.
        """
        result = self.api_request(
            SubjectPatterns.stream_names(self.prefix), {"subject": subject}, timeout
        )
        streams = result.get("streams")
        if not streams:
            raise NotFoundError(f"no stream matches subject '{subject}'")
        return streams[0]

    # Consumers
    def add_consumer(
        self, stream: str, config: ConsumerConfig, timeout: float | None = None
    ) -> ConsumerInfo:
        """Create a consumer, or return it when an identical one exists.

        A named consumer uses the ``CONSUMER.CREATE.<stream>.<name>`` form,
        with the filter subject appended when it narrows the stream. A
        consumer with only a durable name uses the legacy durable form.
        """
        _require_stream(stream)
        if config.name:
            subject = SubjectPatterns.consumer_create(
                self.prefix, stream, config.name, config.filter_subject
            )
        elif config.durable_name:
            subject = SubjectPatterns.durable_create(self.prefix, stream, config.durable_name)
        else:
            subject = SubjectPatterns.consumer_create(self.prefix, stream)

        request = {"stream_name": stream, "config": config.to_wire()}
        return _decode(ConsumerInfo, self.api_request(subject, request, timeout))

    def consumer_info(self, stream: str, consumer: str, timeout: float | None = None) -> ConsumerInfo:
        """Fetch the configuration and state of a consumer."""
        subject = SubjectPatterns.consumer_info(
            self.prefix, _require_stream(stream), _require_consumer(consumer)
        )
        return _decode(ConsumerInfo, self.api_request(subject, timeout=timeout))

    def delete_consumer(self, stream: str, consumer: str, timeout: float | None = None) -> bool:
        """Delete a consumer."""
        subject = SubjectPatterns.consumer_delete(
            self.prefix, _require_stream(stream), _require_consumer(consumer)
        )
        return bool(self.api_request(subject, timeout=timeout).get("success"))

    # Stored messages
    def get_msg(
        self,
        stream: str,
        seq: int | None = None,
        subject: str | None = None,
        next: bool = False,
        direct: bool = False,
        timeout: float | None = None,
    ) -> RawStreamMsg:
        """Fetch a stored message by sequence, or the last one on a subject.

        With ``next`` the first message at or after ``seq`` on ``subject``
        is returned. With ``direct`` the request is answered by any replica
        through the direct get API.

        Raises:
            ValidationError: If neither ``seq`` nor ``subject`` is given.
            NotFoundError: If there is no such message.
        """
        _require_stream(stream)
        request: dict[str, Any] = {}
        if next:
            request["seq"] = seq
            request["next_by_subj"] = subject
        elif seq is not None:
            request["seq"] = seq
        elif subject:
            request["last_by_subj"] = subject
        else:
            raise ValidationError("nats: either seq or subject is required")
        request = {k: v for k, v in request.items() if v is not None}

        if not direct:
            result = self.api_request(
                SubjectPatterns.stream_msg_get(self.prefix, stream), request, timeout
            )
            return RawStreamMsg.from_api(result.get("message") or {}, stream=stream)

        if subject and seq is None:
            api_subject = SubjectPatterns.direct_get(self.prefix, stream, subject)
            payload = b""
        else:
            api_subject = SubjectPatterns.direct_get(self.prefix, stream)
            payload = serialize_dict(request)
        response = self._request(api_subject, payload, timeout)
        envelope = decode_envelope(response)
        if isinstance(envelope, ControlMessage):
            if envelope.code == StatusCode.NOT_FOUND:
                raise NotFoundError(envelope.description or "message not found")
            raise error_from_control(envelope)
        return RawStreamMsg.from_direct(response)

    def get_last_msg(
        self, stream: str, subject: str, direct: bool = False, timeout: float | None = None
    ) -> RawStreamMsg:
        """Fetch the last message stored on a subject."""
        return self.get_msg(stream, subject=subject, direct=direct, timeout=timeout)

    # Account
    def account_info(self, timeout: float | None = None) -> AccountInfo:
        """Fetch JetStream usage and limits of the current account."""
        subject = SubjectPatterns.account_info(self.prefix)
        return _decode(AccountInfo, self.api_request(subject, timeout=timeout))
