"""Tests for JetStream API schemas."""

import base64

import pytest

from jetflow.domain.api_models import (
    ConsumerConfig,
    ConsumerInfo,
    PubAck,
    RawStreamMsg,
    StreamConfig,
    StreamInfo,
    parse_headers,
)
from jetflow.domain.enums import AckPolicy, DeliverPolicy, RetentionPolicy, StorageType
from jetflow.domain.exceptions import SerializationError
from jetflow.domain.models import InboundMessage


class TestConsumerConfig:
    """Test cases for consumer configuration."""

    def test_ack_policy_defaults_to_explicit(self):
        """Test the pull-friendly default."""
        assert ConsumerConfig().ack_policy is AckPolicy.EXPLICIT
        assert ConsumerConfig().to_wire() == {"ack_policy": "explicit"}

    def test_durations_go_out_in_nanoseconds(self):
        """Test seconds to nanoseconds conversion."""
        config = ConsumerConfig(
            durable_name="worker",
            ack_wait=30,
            backoff=[1, 2.5],
            deliver_policy=DeliverPolicy.NEW,
        )

        wire = config.to_wire()

        assert wire["ack_wait"] == 30_000_000_000
        assert wire["backoff"] == [1_000_000_000, 2_500_000_000]
        assert wire["deliver_policy"] == "new"
        assert "max_expires" not in wire

    def test_durations_come_back_in_seconds(self):
        """Test nanoseconds to seconds conversion."""
        config = ConsumerConfig.from_wire(
            {"durable_name": "w", "ack_wait": 30_000_000_000, "unknown_field": True}
        )

        assert config.ack_wait == 30.0
        assert config.durable_name == "w"


class TestConsumerInfo:
    """Test cases for consumer info decoding."""

    def test_decodes_wire_config(self):
        """Test that the nested config gets its durations converted."""
        info = ConsumerInfo.model_validate(
            {
                "stream_name": "ORDERS",
                "name": "worker",
                "config": {"durable_name": "worker", "ack_wait": 5_000_000_000},
                "delivered": {"consumer_seq": 4, "stream_seq": 9},
                "num_pending": 3,
                "cluster": {"leader": "n1"},
            }
        )

        assert info.config.ack_wait == 5.0
        assert info.delivered.stream_seq == 9
        assert info.ack_floor.stream_seq == 0
        assert info.num_pending == 3


class TestStreamModels:
    """Test cases for stream configuration and info."""

    def test_stream_config_round_trip_units(self):
        """Test max_age conversion in both directions."""
        config = StreamConfig(
            name="ORDERS",
            subjects=["orders.>"],
            max_age=3600,
            storage=StorageType.MEMORY,
            retention=RetentionPolicy.WORK_QUEUE,
        )

        wire = config.to_wire()

        assert wire["max_age"] == 3_600_000_000_000
        assert wire["storage"] == "memory"
        assert wire["retention"] == "workqueue"
        assert StreamConfig.from_wire(wire).max_age == 3600.0

    def test_stream_info(self):
        """Test decoding stream info."""
        info = StreamInfo.model_validate(
            {
                "config": {"name": "ORDERS", "subjects": ["orders.>"], "max_age": 0},
                "state": {"messages": 2, "bytes": 10, "first_seq": 1, "last_seq": 2},
                "did_create": True,
            }
        )

        assert info.name == "ORDERS"
        assert info.state.messages == 2
        assert info.did_create is True


class TestPubAck:
    """Test cases for publish acknowledgments."""

    def test_decode(self):
        """Test the optional duplicate flag."""
        ack = PubAck.model_validate({"stream": "ORDERS", "seq": 7, "duplicate": True})

        assert ack.seq == 7
        assert ack.duplicate is True
        assert ack.domain is None


class TestRawStreamMsg:
    """Test cases for stored message decoding."""

    def test_from_api(self):
        """Test base64 payload and header decoding."""
        raw = RawStreamMsg.from_api(
            {
                "subject": "orders.new",
                "seq": 3,
                "data": base64.b64encode(b"payload").decode(),
                "hdrs": base64.b64encode(b"NATS/1.0\r\nX-Trace: abc\r\n\r\n").decode(),
                "time": "2024-01-01T00:00:00Z",
            },
            stream="ORDERS",
        )

        assert raw.data == b"payload"
        assert raw.headers == {"X-Trace": "abc"}
        assert raw.seq == 3
        assert raw.stream == "ORDERS"

    def test_from_api_rejects_bad_base64(self):
        """Test that corrupt payloads raise SerializationError."""
        with pytest.raises(SerializationError):
            RawStreamMsg.from_api({"subject": "s", "seq": 1, "data": "abc"})

    def test_from_direct(self):
        """Test decoding a direct get reply from its headers."""
        raw = RawStreamMsg.from_direct(
            InboundMessage(
                subject="_INBOX.1",
                data=b"x",
                headers={
                    "Nats-Stream": "ORDERS",
                    "Nats-Subject": "orders.new",
                    "Nats-Sequence": "12",
                    "Nats-Time-Stamp": "2024-01-01T00:00:00Z",
                },
            )
        )

        assert raw.seq == 12
        assert raw.subject == "orders.new"
        assert raw.stream == "ORDERS"
        assert raw.data == b"x"


class TestParseHeaders:
    """Test cases for the NATS header block parser."""

    def test_status_line(self):
        """Test that an inline status becomes Status and Description."""
        headers = parse_headers(b"NATS/1.0 404 No Messages\r\n\r\n")

        assert headers == {"Status": "404", "Description": "No Messages"}

    def test_not_a_header_block(self):
        """Test that unrelated bytes give no headers."""
        assert parse_headers(b"hello") == {}
