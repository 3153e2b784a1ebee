"""Type definitions and protocols for strong typing across the package.

This module provides Protocol classes and type aliases for the callbacks
passed between the transport and the dispatch layer.
"""

from typing import Protocol

from .models import InboundMessage


class MessageHandler(Protocol):
    """Protocol for inbound frame handlers.

    A transport calls its handler once per received frame, from its own
    delivery thread. Handlers must not block for long and must not raise.
    """

    def __call__(self, message: InboundMessage) -> None:
        """Handle a raw inbound frame.

        Args:
            message: The frame as received from the server
        """
        ...

