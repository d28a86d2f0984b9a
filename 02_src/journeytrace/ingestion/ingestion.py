"""IngestionEndpoint service: validate, decode and materialize a batch."""

from dataclasses import dataclass
from typing import Any, Protocol

from opentelemetry.trace import Span

from ..logging_config import get_logger
from ..spans import SpanHelper
from .decoding import BrowserEvent, BrowserInfo, TelemetryBatch, decode_event, parse_batch
from .dedup import DeliveryDeduplicator
from .errors import TelemetryError, TelemetryProcessingError

logger = get_logger(__name__)

ISOLATION_MODES = ("event", "batch")


class ISpanMaterializer(Protocol):
    """Conversion of decoded browser events into backend spans."""

    def materialize(
        self,
        event: BrowserEvent,
        session_id: str,
        browser_info: BrowserInfo | None = None,
    ) -> str:
        """Record one span for the event and return its name."""
        ...


@dataclass
class BatchResult:
    """Outcome of one processed batch."""

    processed: int = 0
    failed: int = 0
    duplicates: int = 0

    def to_response(self) -> dict[str, Any]:
        return {
            "status": "success",
            "processed_events": self.processed,
            "failed_events": self.failed,
            "duplicate_events": self.duplicates,
        }


class IIngestionService(Protocol):
    """Interface for browser telemetry ingestion."""

    async def process_batch(self, body: Any) -> BatchResult:
        """Materialize every event of a decoded JSON body."""
        ...


class IngestionService:
    """
    Processes POST /telemetry/browser bodies.

    The whole batch runs under one `business.process_browser_telemetry`
    span; each event becomes a child span via the materializer. In `event`
    isolation mode a failing event is counted and skipped, in `batch` mode
    it fails the request.
    """

    def __init__(
        self,
        materializer: ISpanMaterializer,
        span_helper: SpanHelper,
        deduplicator: DeliveryDeduplicator | None = None,
        isolation: str = "event",
    ):
        if isolation not in ISOLATION_MODES:
            raise ValueError(f"Unknown batch isolation mode: {isolation}")
        self._materializer = materializer
        self._spans = span_helper
        self._dedup = deduplicator
        self._isolation = isolation

    @property
    def isolation(self) -> str:
        return self._isolation

    async def process_batch(self, body: Any) -> BatchResult:
        """
        Process a parsed JSON body.

        Raises:
            TelemetryValidationError: Envelope is invalid (HTTP 400)
            TelemetryProcessingError: Materialization failed (HTTP 500)
        """
        batch = parse_batch(body)
        info = batch.browser_info

        attributes = {
            "telemetry.source": "browser",
            "telemetry.session_id": batch.session_id,
            "browser.session_id": batch.session_id,
            "browser.event_count": len(batch.events),
            "browser.user_agent": (info and info.user_agent) or "unknown",
            "browser.url": (info and info.url) or "unknown",
            "browser.market_session": (info and info.market_session) or "unknown",
        }

        try:
            async with self._spans.async_span(
                "business.process_browser_telemetry", attributes
            ) as span:
                span.add_event(
                    "browser_telemetry.received",
                    {"event_count": len(batch.events), "session_id": batch.session_id},
                )
                result = self._process_events(batch, span)
                span.set_attributes(
                    {
                        "telemetry.processed_events": result.processed,
                        "telemetry.failed_events": result.failed,
                        "telemetry.duplicate_events": result.duplicates,
                    }
                )
                span.add_event(
                    "browser_telemetry.processed",
                    {"processed_count": result.processed},
                )
        except TelemetryError as e:
            logger.error(
                f"Failed to process browser telemetry: {e}",
                extra={"context": {"session_id": batch.session_id}},
            )
            raise TelemetryProcessingError(str(e)) from e
        except Exception as e:
            logger.error(
                f"Failed to process browser telemetry: {e}",
                extra={"context": {"session_id": batch.session_id}},
                exc_info=True,
            )
            raise TelemetryProcessingError(str(e)) from e

        logger.info(
            "Browser telemetry batch processed",
            extra={
                "context": {
                    "session_id": batch.session_id,
                    "processed": result.processed,
                    "failed": result.failed,
                    "duplicates": result.duplicates,
                }
            },
        )
        return result

    def _process_events(self, batch: TelemetryBatch, span: Span) -> BatchResult:
        result = BatchResult()
        for index, raw in enumerate(batch.events):
            try:
                if self._materialize_one(batch, raw):
                    result.processed += 1
                else:
                    result.duplicates += 1
            except Exception as e:
                if self._isolation == "batch":
                    span.add_event(
                        "browser_telemetry.error",
                        {"error.message": str(e), "event_index": index},
                    )
                    raise
                result.failed += 1
                span.add_event(
                    "browser_telemetry.event_failed",
                    {"error.message": str(e), "event_index": index},
                )
                logger.warning(
                    f"Skipping browser event: {e}",
                    extra={"context": {"session_id": batch.session_id, "index": index}},
                )
        return result

    def _materialize_one(self, batch: TelemetryBatch, raw: Any) -> bool:
        """Materialize one raw item. False when it was a redelivery."""
        event = decode_event(raw)
        if self._dedup is not None and self._dedup.seen(
            batch.session_id, event.delivery_id
        ):
            return False
        self._materializer.materialize(event, batch.session_id, batch.browser_info)
        if self._dedup is not None:
            self._dedup.mark(batch.session_id, event.delivery_id)
        return True
