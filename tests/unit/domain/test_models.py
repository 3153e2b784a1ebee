"""Tests for envelope models and pull requests."""

import json

import pytest
from pydantic import ValidationError

from jetflow.domain.models import ControlMessage, DataMessage, InboundMessage, PullRequest


class TestInboundMessage:
    """Test cases for raw frames."""

    def test_defaults(self):
        """Test that reply, data and headers are optional."""
        frame = InboundMessage(subject="a.b")

        assert frame.reply is None
        assert frame.data == b""
        assert frame.headers is None

    def test_subject_required(self):
        """Test that an empty subject is rejected."""
        with pytest.raises(ValidationError):
            InboundMessage(subject="")

    def test_frozen(self):
        """Test that frames are immutable."""
        frame = InboundMessage(subject="a")

        with pytest.raises(ValidationError):
            frame.subject = "b"


class TestEnvelopes:
    """Test cases for the data/control union."""

    def test_kinds(self):
        """Test the discriminating kind field."""
        assert DataMessage(subject="s").kind == "data"
        assert ControlMessage(subject="s", code=404).kind == "control"

    def test_control_has_no_size(self):
        """Test that control messages never count toward pending bytes."""
        assert ControlMessage(subject="s", code=408).size == 0
        assert DataMessage(subject="s", payload=b"abc").size == 3


class TestPullRequest:
    """Test cases for the pull request wire format."""

    def test_batch_only(self):
        """Test that unset fields are left out."""
        assert json.loads(PullRequest(batch=3).to_bytes()) == {"batch": 3}

    def test_expires(self):
        """Test that expires is serialized in nanoseconds."""
        body = json.loads(PullRequest(batch=1, expires=4_999_900_000).to_bytes())

        assert body == {"batch": 1, "expires": 4_999_900_000}

    def test_no_wait_only_when_true(self):
        """Test that no_wait appears only when set."""
        assert json.loads(PullRequest(batch=5, no_wait=True).to_bytes()) == {
            "batch": 5,
            "no_wait": True,
        }
        assert "no_wait" not in json.loads(PullRequest(batch=5, no_wait=False).to_bytes())

    @pytest.mark.parametrize("kwargs", [{"batch": 0}, {"batch": 1, "expires": 0}, {"batch": -2}])
    def test_validation(self, kwargs):
        """Test that invalid sizes are rejected."""
        with pytest.raises(ValidationError):
            PullRequest(**kwargs)
