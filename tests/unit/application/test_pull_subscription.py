"""Tests for pull subscription fetches against a scripted server."""

import threading

import pytest

from jetflow.domain.exceptions import (
    APIError,
    FetchTimeoutError,
    JetFlowError,
    ServiceUnavailableError,
    ValidationError,
)
from tests.builders import ack_subject, data_frame, status_frame


@pytest.fixture
def sub(js, server):
    """A pull subscription bound to the 'worker' durable."""
    subscription = js.pull_subscribe("orders.*", durable="worker")
    yield subscription
    subscription.unsubscribe()


def expires_ns(timeout: float) -> int:
    return int(timeout * 1_000_000_000) - 100_000


def queue_data(transport, sub, *payloads: bytes) -> None:
    """Place data frames in the subscription's inbox as if already delivered."""
    for i, payload in enumerate(payloads, start=1):
        transport.deliver(data_frame(sub.subject, payload, reply=ack_subject(stream_seq=i)))


class TestFetchOne:
    """Test cases for fetching a single message."""

    def test_returns_pending_message(self, sub, server):
        """Test that a pending message is requested and returned."""
        server.enqueue("worker", b"order-1")

        msgs = sub.fetch(1, timeout=1.0)

        assert [m.data for m in msgs] == [b"order-1"]
        assert msgs[0].metadata.stream == "ORDERS"
        assert server.pull_requests == [{"batch": 1, "expires": expires_ns(1.0)}]

    def test_timeout_when_nothing_arrives(self, sub, server, metrics):
        """Test that an unanswered request raises FetchTimeoutError."""
        with pytest.raises(FetchTimeoutError):
            sub.fetch(1, timeout=0.05)

        assert "no_wait" not in server.pull_requests[0]
        assert metrics.counter("fetch.timeouts") == 1

    def test_request_timeout_status(self, sub, server):
        """Test that a 408 from the server ends the fetch."""
        server.expire_with_timeout = True

        with pytest.raises(FetchTimeoutError, match="fetch request timeout"):
            sub.fetch(1, timeout=1.0)

    def test_queued_message_needs_no_request(self, sub, server, transport):
        """Test that an already delivered message is returned directly."""
        queue_data(transport, sub, b"early")

        assert sub.fetch(timeout=0.5)[0].data == b"early"
        assert server.pull_requests == []

    def test_stale_no_messages_is_skipped(self, sub, server, transport):
        """Test that a leftover 404 does not end a later fetch."""
        transport.deliver(status_frame(sub.subject, 404, "No Messages"))
        server.enqueue("worker", b"fresh")

        assert sub.fetch(1, timeout=1.0)[0].data == b"fresh"

    def test_error_status_raises(self, sub, transport):
        """Test that an error status is raised as a typed error."""
        transport.deliver(status_frame(sub.subject, 503))

        with pytest.raises(ServiceUnavailableError):
            sub.fetch(1, timeout=0.5)


class TestFetchBatch:
    """Test cases for fetching several messages."""

    def test_full_batch(self, sub, server, metrics):
        """Test that a no-wait request fills the batch at once."""
        server.enqueue("worker", b"1", b"2", b"3")

        msgs = sub.fetch(3, timeout=1.0)

        assert [m.data for m in msgs] == [b"1", b"2", b"3"]
        assert server.pull_requests == [{"batch": 3, "no_wait": True}]
        assert metrics.counter("fetch.messages") == 3
        assert metrics.counter("fetch.requests") == 1

    def test_partial_batch_after_deadline(self, sub, server):
        """Test that fewer messages are returned once time runs out."""
        server.enqueue("worker", b"1", b"2")

        msgs = sub.fetch(5, timeout=0.1)

        assert [m.data for m in msgs] == [b"1", b"2"]

    def test_no_messages_triggers_waiting_request(self, sub, server, transport):
        """Test that a 404 to the no-wait request is followed by a waiting one."""
        timer = threading.Timer(0.05, queue_data, args=(transport, sub, b"late"))
        timer.start()
        try:
            msgs = sub.fetch(3, timeout=0.3)
        finally:
            timer.cancel()

        assert [m.data for m in msgs] == [b"late"]
        assert server.pull_requests[0] == {"batch": 3, "no_wait": True}
        assert server.pull_requests[1] == {"batch": 3, "expires": expires_ns(0.3)}

    @pytest.mark.timeout(10)
    @pytest.mark.parametrize(("code", "description"), [(408, "Request Timeout"), (404, "No Messages")])
    def test_sentinel_before_deadline_keeps_collecting(self, sub, server, transport, code, description):
        """Test that a status frame arriving mid-batch does not end the fetch."""
        server.enqueue("worker", b"one")

        def late_frames() -> None:
            transport.deliver(status_frame(sub.subject, code, description))
            transport.deliver(data_frame(sub.subject, b"two", reply=ack_subject(stream_seq=2)))

        timer = threading.Timer(0.05, late_frames)
        timer.start()
        try:
            msgs = sub.fetch(2, timeout=2.0)
        finally:
            timer.cancel()

        assert [m.data for m in msgs] == [b"one", b"two"]
        assert server.pull_requests == [{"batch": 2, "no_wait": True}]

    def test_empty_batch_times_out(self, sub, server):
        """Test that a batch with no messages raises FetchTimeoutError."""
        server.expire_with_timeout = True

        with pytest.raises(FetchTimeoutError) as exc_info:
            sub.fetch(4, timeout=0.1)

        assert exc_info.value.batch == 4
        assert len(server.pull_requests) == 2

    def test_fast_path_uses_queued_envelopes(self, sub, server, transport):
        """Test that enough queued envelopes are returned without a request."""
        queue_data(transport, sub, b"a", b"b")
        transport.deliver(status_frame(sub.subject, 404, "No Messages"))

        msgs = sub.fetch(3, timeout=0.5)

        assert [m.data for m in msgs] == [b"a", b"b"]
        assert server.pull_requests == []
        assert sub.pending_msgs == 0

    def test_error_status_in_batch(self, sub, transport):
        """Test that an error status aborts the batch."""
        queue_data(transport, sub, b"a")
        transport.deliver(status_frame(sub.subject, 409, "Consumer Deleted"))

        with pytest.raises(APIError) as exc_info:
            sub.fetch(2, timeout=0.5)

        assert exc_info.value.code == 409


class TestSubscriptionLifecycle:
    """Test cases for argument checks and unsubscribe."""

    @pytest.mark.parametrize(("batch", "timeout"), [(0, 1.0), (1, 0), (1, -1.0), (2, None)])
    def test_invalid_arguments(self, sub, batch, timeout):
        """Test that bad batch sizes and timeouts are rejected."""
        with pytest.raises(ValidationError):
            sub.fetch(batch, timeout=timeout)

    def test_next_msg_unsupported(self, sub):
        """Test that pull subscriptions only deliver through fetch."""
        with pytest.raises(JetFlowError):
            sub.next_msg(timeout=0.1)

    def test_unsubscribe(self, js, server, transport):
        """Test that unsubscribe stops delivery and clears the queue."""
        sub = js.pull_subscribe("orders.*", durable="worker")
        queue_data(transport, sub, b"a")
        inbox = sub.subject

        sub.unsubscribe()
        sub.unsubscribe()

        assert sub.is_closed
        assert sub.pending_msgs == 0
        assert not transport.deliver(data_frame(inbox, b"b"))
        with pytest.raises(JetFlowError):
            sub.fetch(1, timeout=0.1)

    def test_context_manager(self, js, server):
        """Test that leaving the block unsubscribes."""
        with js.pull_subscribe("orders.*", durable="worker") as sub:
            assert not sub.is_closed
        assert sub.is_closed

    def test_consumer_info(self, sub):
        """Test that the bound consumer can be inspected."""
        info = sub.consumer_info()

        assert info.name == "worker"
        assert info.stream_name == "ORDERS"
        assert sub.stream == "ORDERS"
        assert sub.consumer == "worker"
