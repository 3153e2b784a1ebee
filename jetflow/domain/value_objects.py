"""Domain value objects following Domain-Driven Design principles.

These value objects wrap JetStream identifiers and delivery metadata so the
rest of the package never passes bare tuples or untyped strings around.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .patterns import SubjectPatterns

NANOS_PER_SECOND = 1_000_000_000


class StreamName(BaseModel):
    """Value object representing a stream name.

    Stream names must be non-empty and may not contain whitespace, '.', '>'
    or '*', since they become a single subject token in API subjects.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    value: str = Field(..., min_length=1, description="The stream name")

    @field_validator("value")
    @classmethod
    def validate_stream_name(cls, v: str) -> str:
        """Reject names that cannot be used as a subject token."""
        if not SubjectPatterns.is_valid_stream_name(v):
            raise ValueError(
                f"Invalid stream name '{v}'. Must not contain whitespace, '.', '>' or '*'."
            )
        return v

    def __str__(self) -> str:
        """String representation returns the value."""
        return self.value

    def __eq__(self, other: Any) -> bool:
        """Equality comparison."""
        if isinstance(other, StreamName):
            return self.value == other.value
        if isinstance(other, str):
            return self.value == other
        return False

    def __hash__(self) -> int:
        """Make hashable for use in sets and dicts."""
        return hash(self.value)


class SequencePair(BaseModel):
    """Stream and consumer sequence of a delivered message."""

    model_config = ConfigDict(frozen=True, strict=True)

    stream: int = Field(..., ge=0, description="Sequence in the stream")
    consumer: int = Field(..., ge=0, description="Sequence in the consumer")


class ConsumerMetadata(BaseModel):
    """Delivery metadata encoded in a JetStream ack reply subject.

    Computed once per message; immutable afterwards.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    stream: str = Field(..., description="Stream the message was stored in")
    consumer: str = Field(..., description="Consumer that delivered the message")
    domain: str = Field(default="", description="JetStream domain, empty when none")
    sequence: SequencePair
    num_delivered: int = Field(..., ge=0, description="Delivery attempts so far")
    num_pending: int = Field(..., ge=0, description="Messages pending for the consumer")
    timestamp_ns: int = Field(..., ge=0, description="Store time in nanoseconds since epoch")

    @property
    def timestamp(self) -> datetime:
        """Store time as a timezone-aware UTC datetime (microsecond precision)."""
        seconds, nanos = divmod(self.timestamp_ns, NANOS_PER_SECOND)
        return datetime.fromtimestamp(seconds, tz=UTC).replace(microsecond=nanos // 1000)

    @property
    def timestamp_seconds(self) -> int:
        """Whole seconds part of the store time."""
        return self.timestamp_ns // NANOS_PER_SECOND

    @property
    def timestamp_nanos(self) -> int:
        """Sub-second part of the store time, in nanoseconds."""
        return self.timestamp_ns % NANOS_PER_SECOND
