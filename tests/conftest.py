"""Pytest configuration and shared fixtures."""

import os
import time
from unittest.mock import MagicMock

import pytest
from testcontainers.nats import NatsContainer

from jetflow.application.jetstream import JetStreamContext
from jetflow.infrastructure.in_memory_metrics import InMemoryMetrics
from jetflow.infrastructure.in_memory_transport import InMemoryTransport
from jetflow.infrastructure.system_clock import SystemClock
from jetflow.ports.logger import LoggerPort
from tests.builders import FakeJetStream


@pytest.fixture
def transport():
    """Create a connected in-memory transport."""
    return InMemoryTransport()


@pytest.fixture
def metrics():
    """Create a fresh metrics collector."""
    return InMemoryMetrics()


@pytest.fixture
def mock_logger():
    """Create a mock logger satisfying LoggerPort."""
    return MagicMock(spec=LoggerPort)


@pytest.fixture
def server(transport):
    """Create a scripted JetStream server with an ORDERS stream."""
    return FakeJetStream(transport)


@pytest.fixture
def js(transport, server, metrics, mock_logger):
    """Create a JetStream context bound to the scripted server."""
    return JetStreamContext(transport, clock=SystemClock(), logger=mock_logger, metrics=metrics)


@pytest.fixture(scope="session")
def nats_container():
    """Start NATS with JetStream for integration tests."""
    # Skip if explicitly disabled
    if os.getenv("SKIP_INTEGRATION_TESTS", "").lower() == "true":
        pytest.skip("Integration tests disabled")

    # Use existing NATS if available
    if os.getenv("NATS_URL"):
        yield os.getenv("NATS_URL")
        return

    try:
        container = NatsContainer("nats:2.10-alpine")
        container.with_command("-js")
        container.start()
    except Exception as e:
        pytest.skip(f"NATS container unavailable: {e}")

    # Wait for NATS to be ready
    time.sleep(2)

    yield f"nats://localhost:{container.get_exposed_port(4222)}"

    container.stop()
