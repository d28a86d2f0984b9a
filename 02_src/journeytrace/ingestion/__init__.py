"""Browser telemetry ingestion module."""

from .decoding import (
    BrowserEvent,
    BrowserInfo,
    JourneyPayload,
    StandaloneEventPayload,
    TelemetryBatch,
    UnknownPayload,
    decode_event,
    parse_batch,
)
from .dedup import DeliveryDeduplicator
from .errors import (
    TelemetryDecodeError,
    TelemetryError,
    TelemetryProcessingError,
    TelemetryValidationError,
)
from .ingestion import (
    BatchResult,
    IIngestionService,
    IngestionService,
    ISpanMaterializer,
)

__all__ = [
    "BatchResult",
    "BrowserEvent",
    "BrowserInfo",
    "DeliveryDeduplicator",
    "IIngestionService",
    "IngestionService",
    "ISpanMaterializer",
    "JourneyPayload",
    "StandaloneEventPayload",
    "TelemetryBatch",
    "TelemetryDecodeError",
    "TelemetryError",
    "TelemetryProcessingError",
    "TelemetryValidationError",
    "UnknownPayload",
    "decode_event",
    "parse_batch",
]
