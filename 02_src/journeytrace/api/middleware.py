"""Backend half of frontend/backend trace correlation."""

from opentelemetry.trace import SpanKind
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ..app import IApplication
from ..logging_config import get_logger
from ..models.correlation import CORRELATION_ACK_HEADER, CorrelationContext

logger = get_logger(__name__)


class BrowserCorrelationMiddleware(BaseHTTPMiddleware):
    """
    Wraps requests carrying browser correlation headers in a server span.

    The span carries the browser trace id, parent span id, session and
    portfolio as attributes, and the response is tagged with
    `x-backend-trace-correlation: true`. Requests without `x-trace-id`
    pass through untouched.
    """

    def __init__(self, app: ASGIApp, application: IApplication):
        super().__init__(app)
        self._application = application

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation = CorrelationContext.from_headers(request.headers)
        request.state.correlation = correlation
        if correlation is None:
            return await call_next(request)

        span_helper = self._application.span_helper
        async with span_helper.async_span(
            f"{request.method} {request.url.path}",
            correlation.to_span_attributes(),
            kind=SpanKind.SERVER,
        ) as span:
            span.add_event(
                "browser.correlation_established",
                {
                    "browser_trace_id": correlation.trace_id,
                    "has_portfolio_context": correlation.portfolio_id is not None,
                },
            )
            logger.debug(
                "Browser correlation established",
                extra={"context": {"browser_trace_id": correlation.trace_id}},
            )
            response = await call_next(request)
            span.set_attribute("http.status_code", response.status_code)

        response.headers[CORRELATION_ACK_HEADER] = "true"
        return response
