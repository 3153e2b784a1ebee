"""Tests for the inbound dispatcher."""

from jetflow.application.delivery_queue import DeliveryQueue, SubscriptionLimits
from jetflow.application.dispatcher import Dispatcher
from jetflow.domain.models import ControlMessage, DataMessage, InboundMessage
from tests.builders import data_frame, status_frame


class TestDispatcher:
    """Test cases for routing frames into queues."""

    def test_routes_to_matching_queues(self, metrics):
        """Test that every matching queue gets the envelope."""
        dispatcher = Dispatcher(metrics=metrics)
        exact, wildcard, other = DeliveryQueue(), DeliveryQueue(), DeliveryQueue()
        dispatcher.register("orders.new", exact)
        dispatcher.register("orders.*", wildcard)
        dispatcher.register("billing.>", other)

        delivered = dispatcher.dispatch(data_frame("orders.new", b"hi"))

        assert delivered == 2
        assert isinstance(exact.pop(), DataMessage)
        assert wildcard.size == 1
        assert other.empty()
        assert metrics.counter("dispatch.delivered") == 2
        assert metrics.get_all()["gauges"]["dispatch.registrations"] == 3

    def test_status_frames_become_control(self):
        """Test that status frames are decoded before queuing."""
        dispatcher = Dispatcher()
        queue = DeliveryQueue()
        dispatcher.register("_INBOX.a", queue)

        dispatcher(status_frame("_INBOX.a", 404, "No Messages"))

        envelope = queue.pop()
        assert isinstance(envelope, ControlMessage)
        assert envelope.code == 404

    def test_unmatched_frames_are_counted(self, metrics):
        """Test that frames nobody listens to are dropped."""
        dispatcher = Dispatcher(metrics=metrics)

        assert dispatcher.dispatch(data_frame("nobody.home")) == 0
        assert metrics.counter("dispatch.unmatched") == 1

    def test_slow_consumer_drops_for_that_queue_only(self, metrics, mock_logger):
        """Test that a full queue does not block the others."""
        dispatcher = Dispatcher(logger=mock_logger, metrics=metrics)
        full = DeliveryQueue(SubscriptionLimits(pending_msgs_limit=1))
        roomy = DeliveryQueue()
        dispatcher.register("a", full)
        dispatcher.register("a", roomy)
        dispatcher.dispatch(data_frame("a", b"1"))

        delivered = dispatcher.dispatch(data_frame("a", b"2"))

        assert delivered == 1
        assert full.size == 1
        assert roomy.size == 2
        assert metrics.counter("dispatch.slow_consumer") == 1
        mock_logger.warning.assert_called_once()

    def test_undecodable_frame_is_dropped(self, metrics, mock_logger):
        """Test that a garbled status header never raises."""
        dispatcher = Dispatcher(logger=mock_logger, metrics=metrics)
        queue = DeliveryQueue()
        dispatcher.register("a", queue)

        frame = InboundMessage(subject="a", headers={"Status": "bogus"})

        assert dispatcher.dispatch(frame) == 0
        assert queue.empty()
        assert metrics.counter("dispatch.decode_error") == 1
        mock_logger.error.assert_called_once()

    def test_deregister(self):
        """Test that deregistered queues stop receiving."""
        dispatcher = Dispatcher()
        queue = DeliveryQueue()
        dispatcher.register("a.>", queue)
        dispatcher.deregister("a.>", queue)
        dispatcher.deregister("a.>", queue)

        assert dispatcher.dispatch(data_frame("a.b")) == 0
        assert dispatcher.matcher.count() == 0
