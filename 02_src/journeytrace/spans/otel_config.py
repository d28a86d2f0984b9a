"""OpenTelemetry tracer provider setup."""

from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)

from ..config import DEFAULT_SERVICE_NAME
from ..logging_config import get_logger

logger = get_logger(__name__)


def configure_tracing(
    service_name: str = DEFAULT_SERVICE_NAME,
    exporter: SpanExporter | None = None,
    exporter_name: str = "console",
) -> TracerProvider:
    """
    Build a tracer provider for the ingestion service.

    An explicitly passed exporter is attached with a SimpleSpanProcessor so
    spans are visible as soon as they end (tests use InMemorySpanExporter).
    Otherwise `exporter_name` selects a batching console exporter or none.

    The provider is returned, not installed globally; callers hand it to
    SpanHelper.
    """
    provider = TracerProvider(
        resource=Resource.create({"service.name": service_name})
    )

    if exporter is not None:
        provider.add_span_processor(SimpleSpanProcessor(exporter))
    elif exporter_name == "console":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    elif exporter_name != "none":
        raise ValueError(f"Unknown traces exporter: {exporter_name}")

    logger.info(
        "Tracing configured",
        extra={"context": {"service_name": service_name, "exporter": exporter_name}},
    )
    return provider
