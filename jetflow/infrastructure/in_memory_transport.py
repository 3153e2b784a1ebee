"""In-memory transport for tests and examples.

Frames never leave the process. Published frames are recorded and
delivered to local subscriptions; requests and publishes are answered by
responders registered per subject pattern, which lets tests script a
JetStream server without running one.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable

from ..domain.exceptions import ConnectionError, NoRespondersError, TimeoutError
from ..domain.models import InboundMessage
from ..domain.patterns import SubjectPatterns
from ..domain.subject_matcher import SubjectMatcher
from ..domain.types import MessageHandler
from ..ports.transport import DEFAULT_REQUEST_TIMEOUT, TransportPort

Responder = Callable[[InboundMessage], InboundMessage | None]
"""Answers a frame: (request) -> reply frame, or None for no answer"""


def reply_to(
    request: InboundMessage, data: bytes = b"", headers: dict[str, str] | None = None
) -> InboundMessage:
    """Build a frame addressed to a request's reply subject."""
    if not request.reply:
        raise ValueError(f"Frame on '{request.subject}' has no reply subject")
    return InboundMessage(subject=request.reply, data=data, headers=headers)


class InMemoryTransport(TransportPort):
    """Loopback implementation of the transport port."""

    def __init__(self, connected: bool = True):
        self._connected = connected
        self._handler: MessageHandler | None = None
        self._subscriptions = SubjectMatcher()
        self._responders = SubjectMatcher()
        self._lock = threading.Lock()
        self.published: list[InboundMessage] = []

    # Scripting
    def add_responder(self, pattern: str, responder: Responder) -> None:
        """Answer frames published or requested on subjects matching ``pattern``."""
        self._responders.insert(pattern, responder)

    def remove_responder(self, pattern: str, responder: Responder) -> None:
        self._responders.remove(pattern, responder)

    def deliver(self, frame: InboundMessage) -> bool:
        """Hand a frame to the message handler if a subscription matches it.

        Returns:
            True if the frame was delivered.
        """
        handler = self._handler
        if handler is None or not self._subscriptions.match(frame.subject):
            return False
        handler(frame)
        return True

    def published_on(self, subject: str) -> list[InboundMessage]:
        """Recorded frames published on exactly ``subject``."""
        with self._lock:
            return [f for f in self.published if f.subject == subject]

    # TransportPort
    def connect(self) -> None:
        self._connected = True

    def close(self) -> None:
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    def _require_connected(self) -> None:
        if not self._connected:
            raise ConnectionError("Not connected")

    def publish(
        self,
        subject: str,
        payload: bytes = b"",
        reply: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._require_connected()
        frame = InboundMessage(subject=subject, reply=reply, data=payload, headers=headers)
        with self._lock:
            self.published.append(frame)
        for responder in self._responders.match(subject):
            answer = responder(frame)
            if answer is not None:
                self.deliver(answer)
        self.deliver(frame)

    def request(
        self,
        subject: str,
        payload: bytes = b"",
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> InboundMessage:
        self._require_connected()
        frame = InboundMessage(
            subject=subject, reply=self.new_inbox(), data=payload, headers=headers
        )
        with self._lock:
            self.published.append(frame)
        responders = self._responders.match(subject)
        if not responders:
            raise NoRespondersError(subject)
        for responder in responders:
            answer = responder(frame)
            if answer is not None:
                return answer
        raise TimeoutError(f"Request on '{subject}' timed out after {timeout}s")

    def subscribe(self, subject: str, queue: str | None = None) -> None:
        self._require_connected()
        self._subscriptions.insert(subject, subject)

    def unsubscribe(self, subject: str) -> None:
        self._subscriptions.remove(subject, subject)

    def new_inbox(self) -> str:
        return SubjectPatterns.inbox(uuid.uuid4().hex)

    def set_message_handler(self, handler: MessageHandler) -> None:
        self._handler = handler
