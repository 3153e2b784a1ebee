"""Typed schemas for JetStream API requests and responses.

Every JetStream API reply is decoded into one of these models instead of
being handed around as a loose dict. Unknown wire fields are ignored so
newer servers can add fields without breaking decoding.

Durations are expressed in seconds on the Python side and in nanoseconds
on the wire; ``to_wire`` and ``from_wire`` do the conversion.
"""

import base64
import binascii
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import (
    AckPolicy,
    DeliverPolicy,
    DiscardPolicy,
    Header,
    ReplayPolicy,
    RetentionPolicy,
    StorageType,
)
from .exceptions import SerializationError
from .models import InboundMessage

NANOSECOND = 1_000_000_000

HEADER_LINE = "NATS/1.0"


def to_nanos(seconds: float | None) -> int | None:
    """Convert a duration in seconds to whole nanoseconds."""
    if seconds is None:
        return None
    return int(seconds * NANOSECOND)


def from_nanos(nanos: int | None) -> float | None:
    """Convert a duration in nanoseconds to seconds."""
    if nanos is None:
        return None
    return nanos / NANOSECOND


def parse_headers(raw: bytes) -> dict[str, str]:
    """Parse a ``NATS/1.0`` header block into a dict.

    A status line such as ``NATS/1.0 404 No Messages`` contributes the
    ``Status`` and ``Description`` keys.
    """
    text = raw.decode("utf-8", errors="replace")
    lines = text.split("\r\n")
    headers: dict[str, str] = {}
    if not lines or not lines[0].startswith(HEADER_LINE):
        return headers

    status_line = lines[0][len(HEADER_LINE) :].strip()
    if status_line:
        code, _, description = status_line.partition(" ")
        headers[Header.STATUS.value] = code
        if description:
            headers[Header.DESCRIPTION.value] = description.strip()

    for line in lines[1:]:
        if not line:
            continue
        key, sep, value = line.partition(":")
        if sep:
            headers[key.strip()] = value.strip()
    return headers


class _WireModel(BaseModel):
    """Base for JetStream schemas exchanged as JSON."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    # Fields expressed in seconds here and nanoseconds on the wire
    duration_fields: ClassVar[tuple[str, ...]] = ()

    def to_wire(self) -> dict[str, Any]:
        """Dump as a JSON-ready dict with unset fields omitted."""
        data = self.model_dump(mode="json", exclude_none=True, by_alias=True)
        for name in self.duration_fields:
            value = data.get(name)
            if isinstance(value, list):
                data[name] = [to_nanos(v) for v in value]
            elif value is not None:
                data[name] = to_nanos(value)
        return data

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> Self:
        """Build from a decoded JSON dict, converting durations to seconds."""
        data = dict(data)
        for name in cls.duration_fields:
            value = data.get(name)
            if isinstance(value, list):
                data[name] = [from_nanos(v) for v in value]
            elif value is not None:
                data[name] = from_nanos(value)
        return cls.model_validate(data)


class ApiError(BaseModel):
    """The ``error`` object of a failed JetStream API response."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    code: int | None = None
    err_code: int | None = None
    description: str | None = None


class PubAck(BaseModel):
    """Acknowledgment returned by a stream for a published message."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    stream: str
    seq: int
    domain: str | None = None
    duplicate: bool | None = None


class SequenceInfo(BaseModel):
    """Consumer and stream sequence pair with last activity."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    consumer_seq: int = 0
    stream_seq: int = 0
    last_active: str | None = None


class ConsumerConfig(_WireModel):
    """Consumer configuration.

    ``ack_policy`` defaults to explicit acknowledgment, which is what pull
    consumers need.
    """

    duration_fields: ClassVar[tuple[str, ...]] = (
        "ack_wait",
        "backoff",
        "idle_heartbeat",
        "inactive_threshold",
        "max_expires",
    )

    name: str | None = None
    durable_name: str | None = None
    description: str | None = None
    deliver_policy: DeliverPolicy | None = None
    opt_start_seq: int | None = None
    opt_start_time: str | None = None
    ack_policy: AckPolicy = AckPolicy.EXPLICIT
    ack_wait: float | None = None
    max_deliver: int | None = None
    backoff: list[float] | None = None
    filter_subject: str | None = None
    filter_subjects: list[str] | None = None
    replay_policy: ReplayPolicy | None = None
    rate_limit_bps: int | None = None
    sample_freq: str | None = None
    max_waiting: int | None = None
    max_ack_pending: int | None = None
    headers_only: bool | None = None
    max_batch: int | None = None
    max_expires: float | None = None
    max_bytes: int | None = None
    idle_heartbeat: float | None = None
    inactive_threshold: float | None = None
    num_replicas: int | None = None
    mem_storage: bool | None = None
    metadata: dict[str, str] | None = None


class ConsumerInfo(BaseModel):
    """Consumer state as reported by the server."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    stream_name: str
    name: str
    config: ConsumerConfig
    created: str | None = None
    delivered: SequenceInfo = Field(default_factory=SequenceInfo)
    ack_floor: SequenceInfo = Field(default_factory=SequenceInfo)
    num_ack_pending: int = 0
    num_redelivered: int = 0
    num_waiting: int = 0
    num_pending: int = 0
    push_bound: bool | None = None

    @field_validator("config", mode="before")
    @classmethod
    def decode_config(cls, v: Any) -> Any:
        """Decode a wire config, converting nanosecond durations."""
        if isinstance(v, dict):
            return ConsumerConfig.from_wire(v)
        return v


class StreamConfig(_WireModel):
    """Stream configuration."""

    duration_fields: ClassVar[tuple[str, ...]] = ("max_age", "duplicate_window")

    name: str | None = None
    description: str | None = None
    subjects: list[str] | None = None
    retention: RetentionPolicy | None = None
    max_consumers: int | None = None
    max_msgs: int | None = None
    max_bytes: int | None = None
    discard: DiscardPolicy | None = None
    max_age: float | None = None
    max_msgs_per_subject: int | None = None
    max_msg_size: int | None = None
    storage: StorageType | None = None
    num_replicas: int | None = None
    no_ack: bool | None = None
    duplicate_window: float | None = None
    sealed: bool | None = None
    deny_delete: bool | None = None
    deny_purge: bool | None = None
    allow_rollup_hdrs: bool | None = None
    allow_direct: bool | None = None
    mirror_direct: bool | None = None
    metadata: dict[str, str] | None = None


class StreamState(BaseModel):
    """Message counters of a stream."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    messages: int = 0
    bytes: int = 0
    first_seq: int = 0
    last_seq: int = 0
    consumer_count: int = 0
    num_subjects: int | None = None
    num_deleted: int | None = None
    deleted: list[int] | None = None


class StreamInfo(BaseModel):
    """Stream configuration and state as reported by the server."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    config: StreamConfig
    state: StreamState = Field(default_factory=StreamState)
    created: str | None = None
    did_create: bool | None = None

    @field_validator("config", mode="before")
    @classmethod
    def decode_config(cls, v: Any) -> Any:
        """Decode a wire config, converting nanosecond durations."""
        if isinstance(v, dict):
            return StreamConfig.from_wire(v)
        return v

    @property
    def name(self) -> str | None:
        """Name of the stream."""
        return self.config.name


class RawStreamMsg(BaseModel):
    """A message fetched from a stream by sequence or by subject."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    subject: str | None = None
    seq: int | None = None
    data: bytes = b""
    headers: dict[str, str] | None = None
    time: str | None = None
    stream: str | None = None

    @classmethod
    def from_api(cls, message: dict[str, Any], stream: str | None = None) -> "RawStreamMsg":
        """Decode the ``message`` object of a ``STREAM.MSG.GET`` reply.

        Raises:
            SerializationError: If the payload or headers are not valid base64.
        """
        try:
            data = base64.b64decode(message.get("data") or "")
            raw_headers = message.get("hdrs")
            headers = parse_headers(base64.b64decode(raw_headers)) if raw_headers else None
        except (binascii.Error, ValueError) as e:
            raise SerializationError(f"Invalid stored message encoding: {e}") from e
        return cls(
            subject=message.get("subject"),
            seq=message.get("seq"),
            data=data,
            headers=headers,
            time=message.get("time"),
            stream=stream,
        )

    @classmethod
    def from_direct(cls, msg: InboundMessage) -> "RawStreamMsg":
        """Decode a direct get reply, whose metadata travels in headers."""
        headers = dict(msg.headers or {})
        seq = headers.get(Header.SEQUENCE.value)
        return cls(
            subject=headers.get(Header.SUBJECT.value),
            seq=int(seq) if seq else None,
            data=msg.data,
            headers=headers or None,
            time=headers.get(Header.TIME_STAMP.value),
            stream=headers.get(Header.STREAM.value),
        )


class ApiStats(BaseModel):
    """API call counters of an account."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    total: int = 0
    errors: int = 0


class AccountLimits(BaseModel):
    """JetStream limits of an account; -1 means unlimited."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    max_memory: int = -1
    max_storage: int = -1
    max_streams: int = -1
    max_consumers: int = -1


class AccountInfo(BaseModel):
    """JetStream usage and limits of the current account."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    memory: int = 0
    storage: int = 0
    streams: int = 0
    consumers: int = 0
    domain: str | None = None
    limits: AccountLimits = Field(default_factory=AccountLimits)
    api: ApiStats = Field(default_factory=ApiStats)
