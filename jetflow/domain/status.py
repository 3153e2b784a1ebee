"""Status protocol: control sentinels and JetStream error mapping.

A frame whose headers carry the ``Status`` key is a control message, no
matter its payload. Pull consumers see two benign sentinels:

- ``404 No Messages`` in answer to a no-wait pull request with nothing
  pending.
- ``408 Request Timeout`` when a pull request with an expiry ran out.

Every other status, and every ``{"error": {...}}`` body returned by the
JetStream API, maps to a typed ``APIError`` through ``to_error``.
"""

from typing import Any

from .enums import Header, StatusCode, StatusKind
from .exceptions import (
    APIError,
    BadRequestError,
    ConsumerNotFoundError,
    NotFoundError,
    SerializationError,
    ServerError,
    ServiceUnavailableError,
    StreamNotFoundError,
)
from .models import ControlMessage, DataMessage, Envelope, InboundMessage

NO_MESSAGES_DESCRIPTION = "no messages"

STREAM_NOT_FOUND_ERR_CODE = 10059
CONSUMER_NOT_FOUND_ERR_CODE = 10014


def is_status_message(inbound: InboundMessage) -> bool:
    """Check whether a raw frame carries a status header."""
    return bool(inbound.headers) and Header.STATUS.value in inbound.headers


def decode_envelope(inbound: InboundMessage) -> Envelope:
    """Decode a raw frame into a ``DataMessage`` or a ``ControlMessage``.

    Raises:
        SerializationError: If the status header is not numeric.
    """
    if not is_status_message(inbound):
        return DataMessage(
            subject=inbound.subject,
            reply=inbound.reply,
            payload=inbound.data,
            headers=inbound.headers,
        )

    headers = inbound.headers or {}
    raw_code = headers[Header.STATUS.value].strip()
    try:
        code = int(raw_code)
    except ValueError as e:
        raise SerializationError(f"Invalid status header: {raw_code!r}") from e

    return ControlMessage(
        subject=inbound.subject,
        reply=inbound.reply,
        code=code,
        description=headers.get(Header.DESCRIPTION.value) or None,
        headers=headers,
    )


def classify(envelope: Envelope) -> StatusKind:
    """Tell data from the sentinels the fetch protocol understands."""
    if isinstance(envelope, DataMessage):
        return StatusKind.DATA
    if envelope.code == StatusCode.REQUEST_TIMEOUT:
        return StatusKind.REQUEST_TIMEOUT
    if envelope.code == StatusCode.NOT_FOUND and (
        envelope.description is None
        or envelope.description.strip().lower() == NO_MESSAGES_DESCRIPTION
    ):
        return StatusKind.NO_MESSAGES
    return StatusKind.OTHER


def to_error(
    code: int | None,
    err_code: int | None = None,
    description: str | None = None,
    **extra: Any,
) -> APIError:
    """Map a status code and JetStream error code to a typed error."""
    kwargs = {"code": code, "err_code": err_code, "description": description, **extra}
    if code == StatusCode.SERVICE_UNAVAILABLE:
        return ServiceUnavailableError(**kwargs)
    if code == StatusCode.SERVER_ERROR:
        return ServerError(**kwargs)
    if code == StatusCode.NOT_FOUND:
        if err_code == STREAM_NOT_FOUND_ERR_CODE:
            return StreamNotFoundError(**kwargs)
        if err_code == CONSUMER_NOT_FOUND_ERR_CODE:
            return ConsumerNotFoundError(**kwargs)
        return NotFoundError(**kwargs)
    if code == StatusCode.BAD_REQUEST:
        return BadRequestError(**kwargs)
    return APIError(**kwargs)


def error_from_control(envelope: ControlMessage) -> APIError:
    """Map a control sentinel to its typed error."""
    return to_error(envelope.code, None, envelope.description)


def error_from_api(error: dict[str, Any]) -> APIError:
    """Map the ``error`` object of a JetStream API response to its typed error."""
    return to_error(
        error.get("code"),
        error.get("err_code"),
        error.get("description"),
        stream=error.get("stream"),
        seq=error.get("seq"),
    )
