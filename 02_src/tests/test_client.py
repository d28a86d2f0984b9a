"""Tests for BrowserTelemetryClient page lifecycle handling."""

import json

import pytest

from journeytrace.client import BrowserTelemetryClient
from journeytrace.config import TransportSettings
from journeytrace.tracer import PageContext


@pytest.fixture
def telemetry_client(sender, clock):
    page = PageContext(user_agent="ua/1.0", url="http://app/portfolio")
    settings = TransportSettings(endpoint="http://test/telemetry/browser", batch_size=10)
    return BrowserTelemetryClient(page, settings=settings, sender=sender, clock=clock)


class TestBrowserTelemetryClient:
    """Tests for the assembled client."""

    def test_session_shared(self, telemetry_client):
        """Test that tracer and transport use the same session."""
        assert telemetry_client.session.id.startswith("browser-")
        assert telemetry_client.tracer.session is telemetry_client.session

    def test_visibility_change_event(self, telemetry_client):
        """Test that a visibility change queues a page lifecycle event."""
        telemetry_client.visibility_changed(False)

        (item,) = telemetry_client.transport.pending_items()
        assert item.payload["name"] == "page.visibility_change"
        assert item.payload["attributes"]["page.visible"] is False
        assert item.payload["attributes"]["event.type"] == "page_lifecycle"
        assert telemetry_client.tracer.page.visible is False

    def test_unload_ends_journeys_and_beacons(self, telemetry_client, sender):
        """Test that unload ends open journeys as unmounted and sends them."""
        telemetry_client.tracer.start_journey("view_portfolio")

        assert telemetry_client.unload() is True
        body = json.loads(sender.send_beacon.call_args.args[0])
        (event,) = body["events"]
        assert event["data"]["journey_name"] == "view_portfolio"
        assert event["data"]["status"] == "unmounted"
        assert telemetry_client.tracer.active_trace_ids == []

    @pytest.mark.asyncio
    async def test_aclose_flushes_remaining(self, telemetry_client, sender):
        """Test that closing delivers what is still queued."""
        await telemetry_client.start()
        with telemetry_client.scope("PortfolioPage") as scope:
            scope.start("view_portfolio")
            scope.end("view_portfolio")

        await telemetry_client.aclose()

        sender.send.assert_awaited_once()
        sender.aclose.assert_awaited_once()
