"""Journey tracer module."""

from .page_metrics import HeapMemory, NavigationTiming, PageContext, WebVitals
from .tracer import CRITICAL_EVENTS, IJourneyTracer, JourneyTracer

__all__ = [
    "CRITICAL_EVENTS",
    "HeapMemory",
    "IJourneyTracer",
    "JourneyTracer",
    "NavigationTiming",
    "PageContext",
    "WebVitals",
]
