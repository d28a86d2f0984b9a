"""Core data models for journey tracing."""

from .correlation import CorrelationContext
from .journey import (
    Journey,
    JourneyEvent,
    JourneySpan,
    JourneyStatus,
    Priority,
    generate_span_id,
    generate_trace_id,
)
from .market import MarketSession
from .session import QueueItem, Session, generate_session_id

__all__ = [
    # Journeys
    "Journey",
    "JourneyEvent",
    "JourneySpan",
    "JourneyStatus",
    "Priority",
    "generate_trace_id",
    "generate_span_id",
    # Session / queue
    "Session",
    "QueueItem",
    "generate_session_id",
    # Correlation
    "CorrelationContext",
    # Market
    "MarketSession",
]
