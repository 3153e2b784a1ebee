"""Transport port - blocking interface to a NATS connection.

The protocol layers above this port are thread-based: they call the
transport from application threads and receive inbound frames through a
single handler invoked from the transport's delivery thread.
"""

from abc import ABC, abstractmethod

from ..domain.models import InboundMessage
from ..domain.types import MessageHandler

DEFAULT_REQUEST_TIMEOUT = 5.0


class TransportPort(ABC):
    """Abstract interface for publishing, requesting and subscribing."""

    @abstractmethod
    def connect(self) -> None:
        """Open the connection."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Drain subscriptions and close the connection."""
        ...

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if the connection is open."""
        ...

    @abstractmethod
    def publish(
        self,
        subject: str,
        payload: bytes = b"",
        reply: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Publish a frame, optionally with a reply subject and headers."""
        ...

    @abstractmethod
    def request(
        self,
        subject: str,
        payload: bytes = b"",
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> InboundMessage:
        """Publish a frame and wait for the first reply.

        Raises:
            NoRespondersError: If nothing is subscribed to the subject.
            TimeoutError: If no reply arrives in time.
        """
        ...

    @abstractmethod
    def subscribe(self, subject: str, queue: str | None = None) -> None:
        """Start receiving frames for a subject pattern.

        Received frames are passed to the message handler.
        """
        ...

    @abstractmethod
    def unsubscribe(self, subject: str) -> None:
        """Stop receiving frames for a subject pattern."""
        ...

    @abstractmethod
    def new_inbox(self) -> str:
        """Return a fresh, unique inbox subject."""
        ...

    @abstractmethod
    def set_message_handler(self, handler: MessageHandler) -> None:
        """Install the handler called for every received frame."""
        ...
