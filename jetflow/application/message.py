"""JetStream message with its acknowledgment state machine.

A message starts PENDING when it is handed to application code. Ack, nak
and term each move it to ACKNOWLEDGED exactly once; a second attempt
raises ``MsgAlreadyAckedError``. ``in_progress`` only extends the ack
deadline on the server and never changes the state.
"""

from __future__ import annotations

import json
import threading

from ..domain.enums import AckKind, AckState
from ..domain.exceptions import MsgAlreadyAckedError, NotJSMessageError
from ..domain.metadata import parse_metadata
from ..domain.models import DataMessage, InboundMessage
from ..domain.value_objects import ConsumerMetadata
from ..ports.transport import TransportPort

DEFAULT_ACK_SYNC_TIMEOUT = 0.5
NANOSECOND = 1_000_000_000


class JetStreamMessage:
    """A delivered message bound to the transport it must be acked on."""

    def __init__(
        self,
        envelope: DataMessage,
        transport: TransportPort,
        lock: threading.RLock | None = None,
    ):
        """Wrap a data envelope.

        Args:
            envelope: The delivered data message
            transport: Transport used to publish acknowledgments
            lock: Lock serializing state transitions, normally the owning
                subscription's queue lock
        """
        self._envelope = envelope
        self._transport = transport
        self._lock = lock or threading.RLock()
        self._state = AckState.PENDING
        self._metadata: ConsumerMetadata | None = None

    def __repr__(self) -> str:
        return f"<JetStreamMessage subject={self.subject!r} reply={self.reply!r} state={self._state.value}>"

    # Message content
    @property
    def subject(self) -> str:
        return self._envelope.subject

    @property
    def reply(self) -> str | None:
        return self._envelope.reply

    @property
    def data(self) -> bytes:
        return self._envelope.payload

    @property
    def headers(self) -> dict[str, str] | None:
        return self._envelope.headers

    @property
    def metadata(self) -> ConsumerMetadata:
        """Delivery metadata parsed from the reply subject, cached after first use.

        Raises:
            NotJSMessageError: If the reply is not a JetStream ack subject.
        """
        if self._metadata is None:
            self._metadata = parse_metadata(self.reply)
        return self._metadata

    # Ack state
    @property
    def ack_state(self) -> AckState:
        return self._state

    @property
    def is_acked(self) -> bool:
        return self._state is AckState.ACKNOWLEDGED

    def ack(self, timeout: float | None = None) -> InboundMessage | None:
        """Acknowledge the message.

        With a timeout the ack is sent as a request and the server's
        confirmation is returned.
        """
        return self._finish(AckKind.ACK.value.encode(), timeout)

    def ack_sync(self, timeout: float = DEFAULT_ACK_SYNC_TIMEOUT) -> InboundMessage:
        """Acknowledge and wait for the server's confirmation."""
        reply = self._transition()
        return self._transport.request(reply, AckKind.ACK.value.encode(), timeout=timeout)

    def nak(self, delay: float | None = None, timeout: float | None = None) -> InboundMessage | None:
        """Negatively acknowledge, asking for redelivery after ``delay`` seconds."""
        payload = AckKind.NAK.value.encode()
        if delay is not None:
            payload += b" " + json.dumps({"delay": int(delay * NANOSECOND)}).encode()
        return self._finish(payload, timeout)

    def term(self, timeout: float | None = None) -> InboundMessage | None:
        """Stop redelivery of the message for good."""
        return self._finish(AckKind.TERM.value.encode(), timeout)

    def in_progress(self, timeout: float | None = None) -> InboundMessage | None:
        """Reset the server's ack deadline; may be sent any number of times."""
        reply = self._require_reply()
        return self._send(reply, AckKind.PROGRESS.value.encode(), timeout)

    def _require_reply(self) -> str:
        if not self.reply:
            raise NotJSMessageError(self.reply)
        return self.reply

    def _transition(self) -> str:
        reply = self._require_reply()
        with self._lock:
            if self._state is AckState.ACKNOWLEDGED:
                raise MsgAlreadyAckedError(reply)
            self._state = AckState.ACKNOWLEDGED
        return reply

    def _finish(self, payload: bytes, timeout: float | None) -> InboundMessage | None:
        return self._send(self._transition(), payload, timeout)

    def _send(self, reply: str, payload: bytes, timeout: float | None) -> InboundMessage | None:
        if timeout is None:
            self._transport.publish(reply, payload)
            return None
        return self._transport.request(reply, payload, timeout=timeout)
