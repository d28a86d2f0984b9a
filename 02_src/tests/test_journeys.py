"""Tests for domain journey helpers and JourneyScope."""

import httpx
import pytest

from journeytrace.correlation import CorrelationHeaderInjector
from journeytrace.models import Priority
from journeytrace.tracer import journeys
from journeytrace.tracer.journeys import JourneyScope


class TestJourneyHelpers:
    """Tests for the named journey helpers."""

    def test_view_portfolio(self, tracer):
        """Test that view_portfolio() opens a categorized journey."""
        trace_id = journeys.view_portfolio(tracer, "p1")
        journey = tracer.get_journey(trace_id)

        assert journey.name == "view_portfolio"
        assert journey.attributes["portfolio.id"] == "p1"
        assert journey.attributes["journey.category"] == "portfolio"

    def test_login_success(self, tracer, transport):
        """Test that a successful login ends the journey normally."""
        trace_id = journeys.login(tracer)
        journeys.track_login_success(tracer, trace_id, "u1")

        (item,) = transport.pending_items()
        assert item.priority is Priority.NORMAL
        assert [e["name"] for e in item.payload["events"]] == [
            "auth.login_attempt",
            "auth.login_success",
        ]
        assert item.payload["attributes"]["auth.status"] == "success"

    def test_login_failure_sends_critical_event(self, tracer, transport):
        """Test that a failed login emits a critical event and the journey."""
        trace_id = journeys.login(tracer, method="sso")
        journeys.track_login_failure(tracer, trace_id, "bad password")

        critical, journey = transport.pending_items()
        assert critical.priority is Priority.CRITICAL
        assert critical.payload["name"] == "auth.login_failed"
        assert journey.payload["journey_name"] == "user_login"
        assert journey.payload["attributes"]["auth.status"] == "failed"

    def test_stock_operation_joins_symbols(self, tracer):
        """Test that symbol lists are flattened for transport."""
        trace_id = journeys.refresh_portfolio(tracer, "p1")
        journeys.track_stock_operation(tracer, trace_id, "quote", ["AAPL", "MSFT"])

        event = tracer.get_journey(trace_id).events[0]
        assert event.attributes["stock.symbols"] == "AAPL,MSFT"
        assert event.attributes["stock.symbol_count"] == 2

    def test_track_error(self, tracer, transport):
        """Test that errors are recorded as closed journeys."""
        journeys.track_error(tracer, ValueError("bad input"), {"source": "form"})

        (item,) = transport.pending_items()
        assert item.payload["journey_name"] == "error_occurred"
        assert item.payload["attributes"]["error.name"] == "ValueError"
        assert item.payload["events"][0]["attributes"]["error.source"] == "form"

    def test_track_api_error(self, tracer, transport):
        """Test that API errors are recorded with method and status."""
        response = httpx.Response(502)
        journeys.track_api_error(
            tracer, "/api/quotes", RuntimeError("gateway"), "GET", response
        )

        (item,) = transport.pending_items()
        assert item.payload["journey_name"] == "api_error"
        assert item.payload["attributes"]["api.status"] == 502
        assert item.payload["events"][0]["name"] == "api.error_occurred"


class TestJourneyScope:
    """Tests for JourneyScope."""

    def test_start_and_end_by_name(self, tracer, transport):
        """Test that journeys are addressed by name within the scope."""
        scope = JourneyScope(tracer, component_name="PortfolioPage")
        trace_id = scope.start("view_portfolio")
        scope.add_event("view_portfolio", "portfolio.loaded")
        scope.end("view_portfolio")

        assert scope.active_journeys == []
        payload = transport.pending_items()[0].payload
        assert payload["trace_id"] == trace_id
        assert payload["attributes"]["component.name"] == "PortfolioPage"
        assert payload["events"][0]["name"] == "portfolio.loaded"

    def test_close_ends_open_journeys_unmounted(self, tracer, transport):
        """Test that leaving the scope ends what it still holds."""
        with JourneyScope(tracer, component_name="Dashboard") as scope:
            scope.start("view_portfolio")
            scope.start("view_recommendations")

        assert tracer.active_trace_ids == []
        items = transport.pending_items()
        assert len(items) == 2
        assert {i.payload["attributes"]["journey.status"] for i in items} == {"unmounted"}

    def test_invalid_name_not_held(self, tracer):
        """Test that a journey that failed to start is not tracked by the scope."""
        scope = JourneyScope(tracer)
        assert scope.start("") == ""
        assert scope.active_journeys == []

    def test_ending_unknown_name_is_noop(self, tracer, transport):
        scope = JourneyScope(tracer)
        scope.end("never_started")
        assert transport.queue_length == 0

    @pytest.mark.asyncio
    async def test_track_api_call(self, tracer, clock):
        """Test that API calls are attached to the named journey."""
        client = httpx.AsyncClient(
            base_url="http://api.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(200)),
        )
        injector = CorrelationHeaderInjector(tracer, client=client, clock=clock)
        scope = JourneyScope(tracer, injector, component_name="PortfolioPage")
        trace_id = scope.start("view_portfolio")

        await scope.track_api_call("GET", "/api/portfolios", "view_portfolio")
        await injector.aclose()

        assert tracer.get_journey(trace_id).spans[0].name == "API GET /api/portfolios"

    @pytest.mark.asyncio
    async def test_track_api_call_requires_injector(self, tracer):
        scope = JourneyScope(tracer)
        with pytest.raises(RuntimeError):
            await scope.track_api_call("GET", "/api/portfolios")
