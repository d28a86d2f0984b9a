"""End-to-end tests for the HTTP surface."""

import httpx
import pytest

from journeytrace.api import create_fastapi_app


@pytest.fixture
def client(application):
    fastapi_app = create_fastapi_app(application)
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=fastapi_app), base_url="http://test"
    )


def _journey_batch():
    return {
        "session_id": "browser-1704726000000-abc123def",
        "events": [
            {
                "id": "item-1",
                "priority": "normal",
                "timestamp": 1704726000500,
                "data": {
                    "trace_id": "c" * 32,
                    "span_id": "d" * 16,
                    "journey_name": "view_portfolio",
                    "start_time": 1704726000000,
                    "end_time": 1704726000420,
                    "duration": 420,
                    "status": "completed",
                    "attributes": {
                        "journey.status": "completed",
                        "lcp": 2000,
                        "fid": 80,
                        "cls": 0.05,
                    },
                    "events": [],
                    "spans": [],
                },
            }
        ],
        "browser_info": {
            "user_agent": "ua/1.0",
            "url": "http://localhost:5173/portfolio",
            "market_session": "market_hours",
            "timestamp": "2024-01-08T15:00:00+00:00",
        },
    }


class TestTelemetryEndpoint:
    """Tests for POST /telemetry/browser."""

    @pytest.mark.asyncio
    async def test_journey_batch_materialized(self, client, span_exporter):
        """Test that a completed journey produces one scored span."""
        async with client:
            response = await client.post("/telemetry/browser", json=_journey_batch())

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["processed_events"] == 1

        journey_spans = [
            s
            for s in span_exporter.get_finished_spans()
            if s.name == "browser.journey.view_portfolio"
        ]
        assert len(journey_spans) == 1
        assert journey_spans[0].attributes["performance.score"] == 100

    @pytest.mark.asyncio
    async def test_missing_session_id(self, client):
        """Test that an envelope without session_id is rejected with 400."""
        async with client:
            response = await client.post("/telemetry/browser", json={"events": []})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid telemetry data"}

    @pytest.mark.asyncio
    async def test_body_not_json(self, client):
        """Test that a non-JSON body is rejected with 400."""
        async with client:
            response = await client.post(
                "/telemetry/browser",
                content=b"not json",
                headers={"content-type": "application/json"},
            )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid telemetry data"}

    @pytest.mark.asyncio
    async def test_processing_failure(self, client, application, monkeypatch):
        """Test that a processing failure answers 500."""
        from journeytrace.ingestion import TelemetryProcessingError

        async def fail(body):
            raise TelemetryProcessingError("exporter down")

        monkeypatch.setattr(application.ingestion, "process_batch", fail)
        async with client:
            response = await client.post("/telemetry/browser", json=_journey_batch())

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process telemetry data"}

    @pytest.mark.asyncio
    async def test_beacon_body_accepted(self, client):
        """Test that a beacon-style text body is parsed as JSON."""
        import json

        async with client:
            response = await client.post(
                "/telemetry/browser",
                content=json.dumps(_journey_batch()).encode(),
                headers={"content-type": "text/plain"},
            )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_redelivery_reported(self, client):
        """Test that a resent batch is reported as duplicate."""
        async with client:
            await client.post("/telemetry/browser", json=_journey_batch())
            response = await client.post("/telemetry/browser", json=_journey_batch())

        body = response.json()
        assert body["processed_events"] == 0
        assert body["duplicate_events"] == 1


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        async with client:
            response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestCorrelationMiddleware:
    """Tests for BrowserCorrelationMiddleware."""

    @pytest.mark.asyncio
    async def test_correlated_request(self, client, span_exporter):
        """Test that browser headers open a server span and are acknowledged."""
        async with client:
            response = await client.get(
                "/health",
                headers={
                    "x-trace-id": "e" * 32,
                    "x-parent-span-id": "f" * 16,
                    "x-browser-session": "browser-1-abc",
                    "x-portfolio-id": "p1",
                },
            )

        assert response.headers["x-backend-trace-correlation"] == "true"
        (span,) = [s for s in span_exporter.get_finished_spans() if s.name == "GET /health"]
        assert span.attributes["browser.trace_id"] == "e" * 32
        assert span.attributes["browser.parent_span_id"] == "f" * 16
        assert span.attributes["browser.session_id"] == "browser-1-abc"
        assert span.attributes["browser.portfolio_id"] == "p1"
        assert span.attributes["correlation.frontend_backend"] is True
        assert span.attributes["http.status_code"] == 200
        event = span.events[0]
        assert event.name == "browser.correlation_established"
        assert event.attributes["has_portfolio_context"] is True

    @pytest.mark.asyncio
    async def test_uncorrelated_request_passes_through(self, client, span_exporter):
        """Test that requests without x-trace-id are left alone."""
        async with client:
            response = await client.get("/health")

        assert "x-backend-trace-correlation" not in response.headers
        assert span_exporter.get_finished_spans() == ()
