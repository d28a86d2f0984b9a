"""Pytest configuration and fixtures."""

import sys
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, Mock
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

EASTERN = ZoneInfo("America/New_York")


def eastern_ms(*args: int) -> int:
    """Epoch milliseconds for a wall-clock time in New York."""
    return int(datetime(*args, tzinfo=EASTERN).timestamp() * 1000)


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    """Clock pinned to Monday 2024-01-08 10:00 Eastern (market hours)."""
    return FakeClock(eastern_ms(2024, 1, 8, 10, 0))


@pytest.fixture
def span_exporter():
    return InMemorySpanExporter()


@pytest.fixture
def tracer_provider(span_exporter):
    from journeytrace.spans import configure_tracing

    provider = configure_tracing("test-service", exporter=span_exporter)
    yield provider
    provider.shutdown()


@pytest.fixture
def span_helper(tracer_provider):
    from journeytrace.spans import SpanHelper

    return SpanHelper(tracer_provider, service_name="test-service")


@pytest.fixture
def sender():
    """Sender double: async send succeeds, beacon returns True."""
    s = Mock()
    s.send = AsyncMock(return_value=None)
    s.send_beacon = Mock(return_value=True)
    s.aclose = AsyncMock(return_value=None)
    return s


@pytest.fixture
def session():
    from journeytrace.models import Session

    return Session.create("pytest-agent/1.0", "http://localhost:5173/portfolio")


@pytest.fixture
def transport_settings():
    from journeytrace.config import TransportSettings

    return TransportSettings(endpoint="http://test/telemetry/browser", batch_size=5)


@pytest.fixture
def transport(session, sender, transport_settings, clock):
    from journeytrace.transport import TransportLayer

    return TransportLayer(session, sender, transport_settings, clock=clock)


@pytest.fixture
def tracer(session, transport, clock):
    from journeytrace.tracer import JourneyTracer

    return JourneyTracer(session, transport, clock=clock)


@pytest.fixture
def server_settings():
    from journeytrace.config import ServerSettings

    return ServerSettings(service_name="test-service", traces_exporter="none")


@pytest_asyncio.fixture
async def application(server_settings, span_exporter):
    """Started Application exporting into memory."""
    from journeytrace.app import Application

    app = Application(server_settings, span_exporter=span_exporter)
    await app.start()
    yield app
    await app.stop()
