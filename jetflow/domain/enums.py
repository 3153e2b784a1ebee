"""Domain enums for type safety and consistency.

This module centralizes the protocol literals used across the package,
ensuring type safety and preventing string literal errors.
"""

from enum import Enum


class StatusKind(str, Enum):
    """Classification of an inbound envelope.

    Only DATA envelopes are ever handed to application code; the others
    are control sentinels consumed by the fetch protocol.
    """

    DATA = "data"
    NO_MESSAGES = "no_messages"  # 404 "No Messages" after a no-wait pull
    REQUEST_TIMEOUT = "request_timeout"  # 408 when a pull request expires
    OTHER = "other"


class StatusCode(int, Enum):
    """Numeric status codes carried in the status header."""

    BAD_REQUEST = 400
    NOT_FOUND = 404
    REQUEST_TIMEOUT = 408
    SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503


class Header(str, Enum):
    """Reserved header keys."""

    STATUS = "Status"
    DESCRIPTION = "Description"
    MSG_ID = "Nats-Msg-Id"
    EXPECTED_STREAM = "Nats-Expected-Stream"
    EXPECTED_LAST_SEQ = "Nats-Expected-Last-Sequence"
    EXPECTED_LAST_SUBJECT_SEQ = "Nats-Expected-Last-Subject-Sequence"
    EXPECTED_LAST_MSG_ID = "Nats-Expected-Last-Msg-Id"
    LAST_CONSUMER_SEQ = "Nats-Last-Consumer"
    LAST_STREAM_SEQ = "Nats-Last-Stream"
    SUBJECT = "Nats-Subject"
    SEQUENCE = "Nats-Sequence"
    TIME_STAMP = "Nats-Time-Stamp"
    STREAM = "Nats-Stream"


class AckKind(str, Enum):
    """Control tokens published to a message's reply subject."""

    ACK = "+ACK"
    NAK = "-NAK"
    TERM = "+TERM"
    PROGRESS = "+WPI"


class AckState(str, Enum):
    """Acknowledgment state of a delivered message."""

    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"


class AckPolicy(str, Enum):
    """Consumer acknowledgment policies."""

    NONE = "none"
    ALL = "all"
    EXPLICIT = "explicit"


class DeliverPolicy(str, Enum):
    """Where a consumer starts delivering from."""

    ALL = "all"
    LAST = "last"
    NEW = "new"
    BY_START_SEQUENCE = "by_start_sequence"
    BY_START_TIME = "by_start_time"
    LAST_PER_SUBJECT = "last_per_subject"


class ReplayPolicy(str, Enum):
    """How messages are replayed to a consumer."""

    INSTANT = "instant"
    ORIGINAL = "original"


class RetentionPolicy(str, Enum):
    """Stream retention policies."""

    LIMITS = "limits"
    INTEREST = "interest"
    WORK_QUEUE = "workqueue"


class StorageType(str, Enum):
    """Stream storage backends."""

    FILE = "file"
    MEMORY = "memory"


class DiscardPolicy(str, Enum):
    """What a stream discards when it reaches its limits."""

    OLD = "old"
    NEW = "new"
