"""Ingestion service bootstrap and lifecycle management."""

from typing import Protocol

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SpanExporter

from .config import ServerSettings
from .ingestion import DeliveryDeduplicator, IIngestionService, IngestionService
from .logging_config import get_logger
from .materializer import SpanMaterializer
from .spans import SpanHelper, configure_tracing

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    @property
    def span_helper(self) -> SpanHelper:
        ...

    @property
    def ingestion(self) -> IIngestionService:
        ...

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...


class Application:
    """Ingestion service bootstrap."""

    def __init__(
        self,
        settings: ServerSettings | None = None,
        span_exporter: SpanExporter | None = None,
    ):
        self._settings = settings or ServerSettings.from_env()
        self._span_exporter = span_exporter

        # Components (will be initialized in start())
        self._tracer_provider: TracerProvider | None = None
        self._span_helper: SpanHelper | None = None
        self._ingestion: IngestionService | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        if self._ingestion is not None:
            return
        logger.info("Starting application")

        # 1. Tracer provider (no dependencies)
        self._tracer_provider = configure_tracing(
            self._settings.service_name,
            exporter=self._span_exporter,
            exporter_name=self._settings.traces_exporter,
        )

        # 2. SpanHelper (depends on the provider)
        self._span_helper = SpanHelper(
            self._tracer_provider, service_name=self._settings.service_name
        )

        # 3. Materializer + ingestion (depend on SpanHelper)
        materializer = SpanMaterializer(self._span_helper)
        deduplicator = DeliveryDeduplicator(
            window_seconds=self._settings.dedup_window_seconds,
            max_entries=self._settings.dedup_max_entries,
        )
        self._ingestion = IngestionService(
            materializer,
            self._span_helper,
            deduplicator=deduplicator,
            isolation=self._settings.batch_isolation,
        )
        logger.info(
            "All components initialized successfully",
            extra={"context": {"batch_isolation": self._settings.batch_isolation}},
        )

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        self._ingestion = None
        self._span_helper = None
        if self._tracer_provider is not None:
            self._tracer_provider.shutdown()
            self._tracer_provider = None
        logger.info("Application stopped")

    @property
    def settings(self) -> ServerSettings:
        return self._settings

    @property
    def tracer_provider(self) -> TracerProvider:
        if self._tracer_provider is None:
            raise RuntimeError("Application not started")
        return self._tracer_provider

    @property
    def span_helper(self) -> SpanHelper:
        if self._span_helper is None:
            raise RuntimeError("Application not started")
        return self._span_helper

    @property
    def ingestion(self) -> IIngestionService:
        if self._ingestion is None:
            raise RuntimeError("Application not started")
        return self._ingestion
