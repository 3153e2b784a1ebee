"""NATS transport - blocking TransportPort on top of the asyncio nats-py client.

nats-py is asyncio-only while the protocol layers above are thread-based.
The client therefore lives on a private event loop running in a daemon
thread; every blocking call submits a coroutine to that loop and waits on
the resulting future with a deadline.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

import nats
from nats.aio.client import Client as NATSClient
from nats.aio.msg import Msg
from nats.aio.subscription import Subscription
from nats.errors import Error as NATSError
from nats.errors import NoRespondersError as NATSNoRespondersError
from nats.errors import TimeoutError as NATSTimeoutError

from ..domain.exceptions import ConnectionError, NoRespondersError, TimeoutError
from ..domain.models import InboundMessage
from ..domain.types import MessageHandler
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from ..ports.transport import DEFAULT_REQUEST_TIMEOUT, TransportPort
from .config import LogContext, NATSConnectionConfig

T = TypeVar("T")

# Extra time granted to a cross-thread future beyond the operation's own timeout
BRIDGE_TIMEOUT_MARGIN = 1.0


def to_inbound(msg: Msg) -> InboundMessage:
    """Convert a nats-py message into a transport-neutral frame."""
    return InboundMessage(
        subject=msg.subject,
        reply=msg.reply or None,
        data=bytes(msg.data or b""),
        headers=dict(msg.headers) if msg.headers else None,
    )


class NATSTransport(TransportPort):
    """NATS implementation of the transport port."""

    def __init__(
        self,
        config: NATSConnectionConfig | None = None,
        logger: LoggerPort | None = None,
        metrics: MetricsPort | None = None,
    ):
        """Initialize the transport with configuration.

        Args:
            config: Connection configuration. If not provided, uses defaults.
            logger: Optional logger for connection and callback events.
            metrics: Optional metrics port.
        """
        self._config = config or NATSConnectionConfig()
        self._logger = logger
        self._metrics = metrics
        self._nc: NATSClient | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._handler: MessageHandler | None = None
        self._subscriptions: dict[str, Subscription] = {}
        self._lock = threading.Lock()
        self._log_ctx = LogContext(component="NATSTransport")

    def __enter__(self) -> NATSTransport:
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Event loop bridge
    def _start_loop(self) -> asyncio.AbstractEventLoop:
        loop = asyncio.new_event_loop()
        started = threading.Event()

        def run() -> None:
            asyncio.set_event_loop(loop)
            loop.call_soon(started.set)
            loop.run_forever()

        self._thread = threading.Thread(target=run, name="jetflow-nats", daemon=True)
        self._thread.start()
        started.wait()
        return loop

    def _call(self, coro: Coroutine[Any, Any, T], timeout: float) -> T:
        if self._loop is None:
            coro.close()
            raise ConnectionError("Not connected to NATS")
        if threading.current_thread() is self._thread:
            coro.close()
            raise ConnectionError("Blocking transport call from the transport thread")

        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        # nats-py errors first: its TimeoutError is also a concurrent.futures.TimeoutError
        try:
            return future.result(timeout + BRIDGE_TIMEOUT_MARGIN)
        except NATSNoRespondersError as e:
            raise NoRespondersError() from e
        except NATSTimeoutError as e:
            raise TimeoutError(f"Request timed out after {timeout}s") from e
        except NATSError as e:
            raise ConnectionError(f"NATS error: {e}") from e
        except concurrent.futures.TimeoutError as e:
            future.cancel()
            raise TimeoutError(f"Transport call did not complete within {timeout}s") from e

    def _require_client(self) -> NATSClient:
        if self._nc is None or not self._nc.is_connected:
            raise ConnectionError("Not connected to NATS")
        return self._nc

    # Connection
    def connect(self) -> None:
        """Start the event loop thread and connect to the configured servers."""
        with self._lock:
            if self._nc is not None and self._nc.is_connected:
                return
            if self._loop is None:
                self._loop = self._start_loop()

        params = self._config.to_connection_params()
        try:
            self._nc = self._call(nats.connect(**params), self._config.connect_timeout)
        except (OSError, ConnectionError, TimeoutError) as e:
            self._stop_loop()
            raise ConnectionError(f"Failed to connect to {self._config.servers}: {e}") from e

        if self._metrics:
            self._metrics.gauge("nats.connected", 1)
        if self._logger:
            ctx = self._log_ctx.with_operation("connect")
            self._logger.info("Connected to NATS", servers=self._config.servers, **ctx.to_dict())

    def close(self) -> None:
        """Drain and close the connection, then stop the event loop thread."""
        nc = self._nc
        self._nc = None
        self._subscriptions.clear()
        if nc is not None and not nc.is_closed:
            try:
                self._call(nc.drain(), self._config.request_timeout)
            except (ConnectionError, TimeoutError) as e:
                if self._logger:
                    self._logger.warning("Drain failed, closing", error=str(e))
                self._call(nc.close(), self._config.request_timeout)
        self._stop_loop()
        if self._metrics:
            self._metrics.gauge("nats.connected", 0)

    def _stop_loop(self) -> None:
        loop, thread = self._loop, self._thread
        self._loop = None
        self._thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=BRIDGE_TIMEOUT_MARGIN * 5)
        loop.close()

    def is_connected(self) -> bool:
        """Check if connected to NATS."""
        return self._nc is not None and self._nc.is_connected

    # Messaging
    def publish(
        self,
        subject: str,
        payload: bytes = b"",
        reply: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Publish a frame."""
        nc = self._require_client()
        self._call(
            nc.publish(subject, payload, reply=reply or "", headers=headers),
            self._config.request_timeout,
        )

    def request(
        self,
        subject: str,
        payload: bytes = b"",
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> InboundMessage:
        """Send a request and wait for its first reply."""
        nc = self._require_client()
        msg = self._call(nc.request(subject, payload, timeout=timeout, headers=headers), timeout)
        return to_inbound(msg)

    def subscribe(self, subject: str, queue: str | None = None) -> None:
        """Subscribe a subject; frames go to the installed message handler."""
        nc = self._require_client()
        sub = self._call(
            nc.subscribe(subject, queue=queue or "", cb=self._on_message),
            self._config.request_timeout,
        )
        self._subscriptions[subject] = sub
        if self._logger:
            self._logger.debug("Subscribed", subject=subject, queue=queue)

    def unsubscribe(self, subject: str) -> None:
        """Unsubscribe a subject (no-op when not subscribed)."""
        sub = self._subscriptions.pop(subject, None)
        if sub is None or self._nc is None:
            return
        self._call(sub.unsubscribe(), self._config.request_timeout)

    def new_inbox(self) -> str:
        """Return a fresh inbox subject."""
        return self._require_client().new_inbox()

    def set_message_handler(self, handler: MessageHandler) -> None:
        """Install the handler receiving every subscribed frame."""
        self._handler = handler

    async def _on_message(self, msg: Msg) -> None:
        handler = self._handler
        if handler is None:
            if self._metrics:
                self._metrics.increment("nats.unhandled")
            return
        try:
            handler(to_inbound(msg))
        except Exception as e:
            if self._logger:
                ctx = self._log_ctx.with_operation("deliver").with_error(e)
                self._logger.error(
                    "Message handler failed", subject=msg.subject, error=str(e), **ctx.to_dict()
                )
            if self._metrics:
                self._metrics.increment("nats.handler_errors")
