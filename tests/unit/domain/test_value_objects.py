"""Tests for domain value objects."""

import pytest
from pydantic import ValidationError

from jetflow.domain.value_objects import ConsumerMetadata, SequencePair, StreamName


class TestStreamName:
    """Test cases for StreamName value object."""

    def test_valid(self):
        """Test creating valid stream names."""
        name = StreamName(value="ORDERS")
        assert str(name) == "ORDERS"
        assert name == "ORDERS"
        assert name == StreamName(value="ORDERS")
        assert len({name, StreamName(value="ORDERS")}) == 1

    @pytest.mark.parametrize("value", ["", "a.b", "a b", "a*", "a>"])
    def test_invalid(self, value):
        """Test that reserved characters are rejected."""
        with pytest.raises(ValidationError):
            StreamName(value=value)

    def test_not_equal_to_other_types(self):
        """Test equality against unrelated objects."""
        assert StreamName(value="S") != 1


class TestConsumerMetadata:
    """Test cases for delivery metadata."""

    def make(self, **overrides) -> ConsumerMetadata:
        values = {
            "stream": "ORDERS",
            "consumer": "worker",
            "sequence": SequencePair(stream=10, consumer=4),
            "num_delivered": 1,
            "num_pending": 0,
            "timestamp_ns": 1_000_000_001_500,
        }
        values.update(overrides)
        return ConsumerMetadata(**values)

    def test_defaults(self):
        """Test that the domain defaults to empty."""
        assert self.make().domain == ""

    def test_timestamp_parts(self):
        """Test splitting the store time."""
        meta = self.make()
        assert meta.timestamp_seconds == 1000
        assert meta.timestamp_nanos == 1_500
        assert meta.timestamp.microsecond == 1

    def test_frozen(self):
        """Test immutability."""
        meta = self.make()
        with pytest.raises(ValidationError):
            meta.num_pending = 3

    def test_negative_counters_rejected(self):
        """Test that counters cannot be negative."""
        with pytest.raises(ValidationError):
            self.make(num_pending=-1)
        with pytest.raises(ValidationError):
            SequencePair(stream=-1, consumer=0)
