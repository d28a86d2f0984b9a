"""Browser-to-backend journey tracing."""

from .client import BrowserTelemetryClient
from .config import ServerSettings, TransportSettings
from .correlation import CorrelationHeaderInjector
from .ingestion import IngestionService
from .materializer import SpanMaterializer
from .models import CorrelationContext, Journey, JourneyStatus, Priority
from .spans import SpanHelper
from .tracer import JourneyTracer, PageContext
from .transport import TransportLayer

__all__ = [
    "BrowserTelemetryClient",
    "CorrelationContext",
    "CorrelationHeaderInjector",
    "IngestionService",
    "Journey",
    "JourneyStatus",
    "JourneyTracer",
    "PageContext",
    "Priority",
    "ServerSettings",
    "SpanHelper",
    "SpanMaterializer",
    "TransportLayer",
    "TransportSettings",
]
