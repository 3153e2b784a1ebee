"""Domain-specific exceptions following DDD principles."""

from typing import Any


class JetFlowError(Exception):
    """Base exception for all JetFlow errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(JetFlowError):
    """Domain validation errors."""

    pass


class InvalidSubjectError(ValidationError):
    """Raised when a subject or subscription pattern is malformed."""

    def __init__(self, subject: str, reason: str):
        super().__init__(
            f"nats: invalid subject '{subject}': {reason}",
            details={"subject": subject, "reason": reason},
        )
        self.subject = subject
        self.reason = reason


class InvalidStreamNameError(ValidationError):
    """Raised when a stream name is empty or contains reserved characters."""

    def __init__(self, message: str = "nats: invalid stream name"):
        super().__init__(message)


class InvalidConsumerNameError(ValidationError):
    """Raised when a consumer name is empty."""

    def __init__(self, message: str = "nats: invalid consumer name"):
        super().__init__(message)


class InvalidDurableNameError(ValidationError):
    """Raised when a pull subscription is created without a durable name."""

    def __init__(self, message: str = "nats: invalid durable name"):
        super().__init__(message)


class MessageBusError(JetFlowError):
    """Message bus communication errors."""

    pass


class ConnectionError(MessageBusError):
    """Connection-related errors."""

    pass


class TimeoutError(MessageBusError):
    """Operation timeout errors."""

    pass


class FetchTimeoutError(TimeoutError):
    """Raised when a fetch produced no message before its deadline."""

    def __init__(self, message: str = "nats: fetch timeout", batch: int | None = None):
        super().__init__(message)
        self.batch = batch
        if batch is not None:
            self.details["batch"] = batch


class NoRespondersError(MessageBusError):
    """Raised when a request has no responders on the server."""

    def __init__(self, subject: str | None = None):
        super().__init__("nats: no responders available for request")
        self.subject = subject
        if subject:
            self.details["subject"] = subject


class SlowConsumerError(MessageBusError):
    """Raised when a delivery queue is full and a message had to be dropped."""

    def __init__(self, pending_msgs: int, pending_bytes: int):
        super().__init__(
            "nats: slow consumer, messages dropped",
            details={"pending_msgs": pending_msgs, "pending_bytes": pending_bytes},
        )
        self.pending_msgs = pending_msgs
        self.pending_bytes = pending_bytes


class SerializationError(MessageBusError):
    """Serialization/deserialization errors."""

    pass


class JetStreamError(JetFlowError):
    """Errors that arise when interacting with JetStream."""

    pass


class NotJSMessageError(JetStreamError):
    """Raised when a delivered message does not carry a JetStream ack subject."""

    def __init__(self, reply: str | None = None):
        super().__init__("nats: not a jetstream message")
        self.reply = reply
        if reply is not None:
            self.details["reply"] = reply


class MsgAlreadyAckedError(JetStreamError):
    """Raised on a second terminal acknowledgment of the same message."""

    def __init__(self, reply: str | None = None):
        super().__init__(f"nats: message was already acknowledged: {reply}")
        self.reply = reply
        if reply is not None:
            self.details["reply"] = reply


class NoStreamResponseError(JetStreamError):
    """Raised when a JetStream publish has no stream to answer it."""

    def __init__(self, subject: str | None = None):
        super().__init__("nats: no response from stream")
        self.subject = subject
        if subject:
            self.details["subject"] = subject


class APIError(JetStreamError):
    """Error reported by the JetStream API, either as a status or a JSON body."""

    default_code: int | None = None

    def __init__(
        self,
        description: str | None = None,
        code: int | None = None,
        err_code: int | None = None,
        stream: str | None = None,
        seq: int | None = None,
    ):
        code = code if code is not None else self.default_code
        super().__init__(f"{description} (status_code={code}, err_code={err_code})")
        self.code = code
        self.err_code = err_code
        self.description = description
        self.stream = stream
        self.seq = seq
        details: dict[str, Any] = {"code": code, "err_code": err_code, "description": description}
        self.details.update({k: v for k, v in details.items() if v is not None})


class ServiceUnavailableError(APIError):
    """JetStream is not enabled or temporarily unavailable (status 503)."""

    default_code = 503


class ServerError(APIError):
    """Hard failure inside JetStream (status 500)."""

    default_code = 500


class NotFoundError(APIError):
    """A JetStream object was not found (status 404)."""

    default_code = 404


class StreamNotFoundError(NotFoundError):
    """The stream does not exist (err_code 10059)."""

    pass


class ConsumerNotFoundError(NotFoundError):
    """The consumer or durable does not exist (err_code 10014)."""

    pass


class BadRequestError(APIError):
    """The client made an invalid request (status 400)."""

    default_code = 400
