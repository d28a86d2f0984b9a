"""Correlation headers on outbound business API calls."""

import time
from typing import Any, Callable

import httpx

from ..logging_config import get_logger
from ..models import generate_trace_id
from ..models.correlation import (
    PARENT_SPAN_ID_HEADER,
    PORTFOLIO_ID_HEADER,
    SESSION_HEADER,
    TRACE_ID_HEADER,
)
from ..tracer import JourneyTracer

logger = get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class CorrelationHeaderInjector:
    """
    Wraps business API calls so the backend can attribute its spans.

    Each call carries x-trace-id, x-parent-span-id and x-browser-session,
    plus x-portfolio-id when given. When the call belongs to an open
    journey, a child span is recorded on it once the call settles, whether
    it succeeded or raised. Errors from the call itself reach the caller
    unchanged.
    """

    def __init__(
        self,
        tracer: JourneyTracer,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], int] | None = None,
    ):
        self._tracer = tracer
        self._client = client or httpx.AsyncClient()
        self._clock = clock or _now_ms

    def correlation_headers(
        self, trace_id: str | None = None, portfolio_id: str | None = None
    ) -> dict[str, str]:
        """Headers linking a request to a journey (or to a fresh trace)."""
        headers = {
            TRACE_ID_HEADER: trace_id or generate_trace_id(),
            SESSION_HEADER: self._tracer.session.id,
        }
        journey = self._tracer.get_journey(trace_id) if trace_id else None
        if journey is not None:
            headers[PARENT_SPAN_ID_HEADER] = journey.span_id
        if portfolio_id:
            headers[PORTFOLIO_ID_HEADER] = portfolio_id
        return headers

    async def request(
        self,
        method: str,
        url: str,
        *,
        trace_id: str | None = None,
        portfolio_id: str | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        method = method.upper()
        merged_headers = {
            **(headers or {}),
            **self.correlation_headers(trace_id, portfolio_id),
        }
        span_name = f"API {method} {url}"
        start = self._clock()

        try:
            response = await self._client.request(
                method, url, headers=merged_headers, **kwargs
            )
        except Exception as e:
            logger.debug("API call failed: %s %s: %s", method, url, e)
            if trace_id:
                self._tracer.add_journey_span(
                    trace_id,
                    span_name,
                    start,
                    self._clock(),
                    {
                        "http.method": method,
                        "http.url": url,
                        "error.type": type(e).__name__,
                        "error.message": str(e),
                        "api.success": False,
                    },
                )
            raise

        if trace_id:
            self._tracer.add_journey_span(
                trace_id,
                span_name,
                start,
                self._clock(),
                {
                    "http.method": method,
                    "http.url": url,
                    "http.status_code": response.status_code,
                    "http.response_size": response.headers.get(
                        "content-length", "unknown"
                    ),
                    "api.success": response.is_success,
                },
            )
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()
