"""Integration tests for pull consumers against a real NATS JetStream server."""

import uuid

import pytest

from jetflow.application.jetstream import JetStreamContext
from jetflow.domain.api_models import ConsumerConfig, StreamConfig
from jetflow.domain.enums import StorageType
from jetflow.domain.exceptions import (
    FetchTimeoutError,
    MsgAlreadyAckedError,
    StreamNotFoundError,
)
from jetflow.infrastructure.config import NATSConnectionConfig
from jetflow.infrastructure.in_memory_metrics import InMemoryMetrics
from jetflow.infrastructure.nats_transport import NATSTransport
from jetflow.infrastructure.simple_logger import SimpleLogger
from jetflow.infrastructure.system_clock import SystemClock

pytestmark = [pytest.mark.integration, pytest.mark.timeout(60)]


@pytest.fixture
def nats_transport(nats_container):
    """A transport connected to the test server."""
    transport = NATSTransport(
        NATSConnectionConfig(servers=[nats_container]),
        logger=SimpleLogger("jetflow.integration"),
        metrics=InMemoryMetrics(),
    )
    transport.connect()
    yield transport
    transport.close()


@pytest.fixture
def stream_name():
    return f"IT_{uuid.uuid4().hex[:8].upper()}"


@pytest.fixture
def js(nats_transport, stream_name):
    """A JetStream context with a fresh memory stream."""
    context = JetStreamContext(nats_transport, clock=SystemClock())
    context.add_stream(
        StreamConfig(
            name=stream_name,
            subjects=[f"{stream_name.lower()}.>"],
            storage=StorageType.MEMORY,
        )
    )
    yield context
    context.delete_stream(stream_name)


class TestPullConsumer:
    """End to end publish, fetch and ack."""

    def test_publish_fetch_ack(self, js, stream_name):
        subject = f"{stream_name.lower()}.created"
        for i in range(3):
            ack = js.publish(subject, f"order-{i}".encode())
            assert ack.stream == stream_name

        with js.pull_subscribe(subject, durable="worker") as sub:
            msgs = sub.fetch(3, timeout=2.0)
            assert [m.data for m in msgs] == [b"order-0", b"order-1", b"order-2"]

            for msg in msgs:
                assert msg.metadata.stream == stream_name
                assert msg.metadata.consumer == "worker"
                msg.ack_sync(timeout=2.0)

            with pytest.raises(MsgAlreadyAckedError):
                msgs[0].ack()

            info = sub.consumer_info()
            assert info.ack_floor.stream_seq == 3
            assert info.num_ack_pending == 0

    def test_fetch_timeout_on_empty_consumer(self, js, stream_name):
        with js.pull_subscribe(f"{stream_name.lower()}.>", durable="idle") as sub:
            with pytest.raises(FetchTimeoutError):
                sub.fetch(1, timeout=0.5)
            with pytest.raises(FetchTimeoutError):
                sub.fetch(5, timeout=0.5)

    def test_nak_redelivers(self, js, stream_name):
        subject = f"{stream_name.lower()}.retry"
        js.publish(subject, b"again")

        with js.pull_subscribe(
            subject, durable="retrier", config=ConsumerConfig(ack_wait=30)
        ) as sub:
            first = sub.fetch(1, timeout=2.0)[0]
            first.nak()

            second = sub.fetch(1, timeout=2.0)[0]
            assert second.data == b"again"
            assert second.metadata.num_delivered == 2
            second.term()

    def test_partial_batch(self, js, stream_name):
        subject = f"{stream_name.lower()}.partial"
        js.publish(subject, b"only")

        with js.pull_subscribe(subject, durable="partial") as sub:
            msgs = sub.fetch(10, timeout=0.5)
            assert [m.data for m in msgs] == [b"only"]

    def test_get_msg(self, js, stream_name):
        subject = f"{stream_name.lower()}.stored"
        ack = js.publish(subject, b"kept", headers={"X-Trace": "abc"})

        msg = js.get_msg(stream_name, seq=ack.seq)

        assert msg.data == b"kept"
        assert msg.subject == subject
        assert msg.headers["X-Trace"] == "abc"


def test_unknown_stream(nats_transport):
    context = JetStreamContext(nats_transport, clock=SystemClock())

    with pytest.raises(StreamNotFoundError):
        context.stream_info("DOES_NOT_EXIST")
