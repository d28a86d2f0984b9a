"""Run operations inside OpenTelemetry spans."""

from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Iterator, Mapping, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, TracerProvider

from ..config import DEFAULT_SERVICE_NAME

T = TypeVar("T")

INSTRUMENTATION_NAME = "journeytrace"
INSTRUMENTATION_VERSION = "1.0.0"


def clean_attributes(attributes: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop None values and stringify anything OpenTelemetry cannot carry."""
    if not attributes:
        return {}
    cleaned: dict[str, Any] = {}
    for key, value in attributes.items():
        if value is None:
            continue
        if isinstance(value, (str, bool, int, float)):
            cleaned[key] = value
        else:
            cleaned[key] = str(value)
    return cleaned


class SpanHelper:
    """
    Single primitive for traced work: run something inside a span.

    The span always ends, on success and on exception. Exceptions are
    recorded on the span, mark it ERROR and propagate unchanged.
    """

    def __init__(
        self,
        tracer_provider: TracerProvider | None = None,
        service_name: str = DEFAULT_SERVICE_NAME,
    ):
        self._service_name = service_name
        if tracer_provider is not None:
            self._tracer = tracer_provider.get_tracer(
                INSTRUMENTATION_NAME, INSTRUMENTATION_VERSION
            )
        else:
            self._tracer = trace.get_tracer(
                INSTRUMENTATION_NAME, INSTRUMENTATION_VERSION
            )

    def _start_attributes(self, attributes: Mapping[str, Any] | None) -> dict[str, Any]:
        return {"service.name": self._service_name, **clean_attributes(attributes)}

    @contextmanager
    def span(
        self,
        name: str,
        attributes: Mapping[str, Any] | None = None,
        kind: SpanKind = SpanKind.INTERNAL,
    ) -> Iterator[Span]:
        """Synchronous span context manager."""
        with self._tracer.start_as_current_span(
            name,
            kind=kind,
            attributes=self._start_attributes(attributes),
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            try:
                yield span
            except Exception as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise
            else:
                span.set_status(Status(StatusCode.OK))

    @asynccontextmanager
    async def async_span(
        self,
        name: str,
        attributes: Mapping[str, Any] | None = None,
        kind: SpanKind = SpanKind.INTERNAL,
    ) -> AsyncIterator[Span]:
        """Async span context manager."""
        with self.span(name, attributes=attributes, kind=kind) as span:
            yield span

    async def with_span(
        self,
        name: str,
        fn: Callable[[], Awaitable[T]],
        attributes: Mapping[str, Any] | None = None,
    ) -> T:
        """Await `fn()` inside a span named `name` and return its result."""
        async with self.async_span(name, attributes=attributes):
            return await fn()

    @staticmethod
    def add_span_attributes(attributes: Mapping[str, Any]) -> None:
        """Set attributes on the current span, if one is recording."""
        span = trace.get_current_span()
        if span.is_recording():
            span.set_attributes(clean_attributes(attributes))

    @staticmethod
    def record_span_event(
        name: str,
        attributes: Mapping[str, Any] | None = None,
        timestamp_ns: int | None = None,
    ) -> None:
        """Add an event to the current span, if one is recording."""
        span = trace.get_current_span()
        if span.is_recording():
            span.add_event(
                name, attributes=clean_attributes(attributes), timestamp=timestamp_ns
            )
