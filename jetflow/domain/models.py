"""Domain models using Pydantic for validation.

Inbound frames are decoded exactly once, at the boundary, into a tagged
union: ``DataMessage`` for application payloads and ``ControlMessage`` for
status sentinels. Downstream code switches on the type instead of probing
headers.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import SerializationError


class InboundMessage(BaseModel):
    """A raw frame as produced by a transport, before classification."""

    model_config = ConfigDict(frozen=True, strict=True)

    subject: str = Field(..., min_length=1, description="Subject the frame was delivered on")
    reply: str | None = Field(default=None, description="Reply-to subject")
    data: bytes = Field(default=b"", description="Frame payload")
    headers: dict[str, str] | None = Field(default=None, description="Frame headers")


class DataMessage(BaseModel):
    """An application message."""

    model_config = ConfigDict(frozen=True, strict=True)

    kind: Literal["data"] = "data"
    subject: str
    reply: str | None = None
    payload: bytes = b""
    headers: dict[str, str] | None = None

    @property
    def size(self) -> int:
        """Payload size in bytes."""
        return len(self.payload)


class ControlMessage(BaseModel):
    """A status sentinel; never handed to application code."""

    model_config = ConfigDict(frozen=True, strict=True)

    kind: Literal["control"] = "control"
    subject: str
    reply: str | None = None
    code: int
    description: str | None = None
    headers: dict[str, str] | None = None

    @property
    def size(self) -> int:
        """Control messages carry no payload."""
        return 0


Envelope = DataMessage | ControlMessage


class PullRequest(BaseModel):
    """Payload published to a pull consumer's next-message subject."""

    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)

    batch: int = Field(..., ge=1, description="Number of messages requested")
    expires: int | None = Field(
        default=None, gt=0, description="Server-side expiry of the request in nanoseconds"
    )
    no_wait: bool = Field(default=False, description="Answer immediately when nothing is pending")

    def to_bytes(self) -> bytes:
        """Encode as JSON; ``expires`` and ``no_wait`` appear only when set."""
        exclude = set()
        if self.expires is None:
            exclude.add("expires")
        if not self.no_wait:
            exclude.add("no_wait")
        try:
            return self.model_dump_json(exclude=exclude).encode()
        except Exception as e:
            raise SerializationError(f"Failed to serialize pull request: {e}") from e
