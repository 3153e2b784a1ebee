"""Domain layer - Subject routing, protocol types and pure parsing logic."""

from .api_models import (
    AccountInfo,
    ConsumerConfig,
    ConsumerInfo,
    PubAck,
    RawStreamMsg,
    SequenceInfo,
    StreamConfig,
    StreamInfo,
    StreamState,
)
from .enums import (
    AckKind,
    AckPolicy,
    AckState,
    DeliverPolicy,
    DiscardPolicy,
    Header,
    ReplayPolicy,
    RetentionPolicy,
    StatusCode,
    StatusKind,
    StorageType,
)
from .exceptions import (
    APIError,
    BadRequestError,
    ConnectionError,
    ConsumerNotFoundError,
    FetchTimeoutError,
    InvalidConsumerNameError,
    InvalidDurableNameError,
    InvalidStreamNameError,
    InvalidSubjectError,
    JetFlowError,
    JetStreamError,
    MessageBusError,
    MsgAlreadyAckedError,
    NoRespondersError,
    NoStreamResponseError,
    NotFoundError,
    NotJSMessageError,
    SerializationError,
    ServerError,
    ServiceUnavailableError,
    SlowConsumerError,
    StreamNotFoundError,
    TimeoutError,
    ValidationError,
)
from .metadata import parse_metadata
from .models import ControlMessage, DataMessage, Envelope, InboundMessage, PullRequest
from .patterns import SubjectPatterns
from .status import classify, decode_envelope, error_from_api, error_from_control, to_error
from .subject_matcher import SubjectMatcher
from .types import MessageHandler
from .value_objects import ConsumerMetadata, SequencePair, StreamName

__all__ = [
    # Exceptions
    "APIError",
    "AccountInfo",
    # Enums
    "AckKind",
    "AckPolicy",
    "AckState",
    "BadRequestError",
    "ConnectionError",
    # API schemas
    "ConsumerConfig",
    "ConsumerInfo",
    "ConsumerMetadata",
    "ConsumerNotFoundError",
    # Models
    "ControlMessage",
    "DataMessage",
    "DeliverPolicy",
    "DiscardPolicy",
    "Envelope",
    "FetchTimeoutError",
    "Header",
    "InboundMessage",
    "InvalidConsumerNameError",
    "InvalidDurableNameError",
    "InvalidStreamNameError",
    "InvalidSubjectError",
    "JetFlowError",
    "JetStreamError",
    "MessageBusError",
    # Types
    "MessageHandler",
    "MsgAlreadyAckedError",
    "NoRespondersError",
    "NoStreamResponseError",
    "NotFoundError",
    "NotJSMessageError",
    "PubAck",
    "PullRequest",
    "RawStreamMsg",
    "ReplayPolicy",
    "RetentionPolicy",
    "SequenceInfo",
    "SequencePair",
    "SerializationError",
    "ServerError",
    "ServiceUnavailableError",
    "SlowConsumerError",
    "StatusCode",
    "StatusKind",
    "StorageType",
    "StreamConfig",
    "StreamInfo",
    "StreamName",
    "StreamNotFoundError",
    "StreamState",
    # Routing
    "SubjectMatcher",
    "SubjectPatterns",
    "TimeoutError",
    "ValidationError",
    # Protocol functions
    "classify",
    "decode_envelope",
    "error_from_api",
    "error_from_control",
    "parse_metadata",
    "to_error",
]
