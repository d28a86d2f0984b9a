"""SpanMaterializer: one backend span per delivered browser event."""

from typing import Any, Mapping

from opentelemetry.trace import Span

from ..ingestion.decoding import (
    BrowserEvent,
    BrowserInfo,
    JourneyPayload,
    StandaloneEventPayload,
)
from ..logging_config import get_logger
from ..models import Priority
from ..spans import SpanHelper
from .scoring import calculate_performance_score

logger = get_logger(__name__)

# Journey attributes copied under performance.* for completed journeys.
PERFORMANCE_KEYS = (
    "lcp",
    "fid",
    "cls",
    "navigation_type",
    "dns_time",
    "connect_time",
    "response_time",
    "dom_ready_time",
    "load_time",
    "memory.used_heap_size",
    "memory.total_heap_size",
    "memory.heap_size_limit",
)


def is_scalar(value: Any) -> bool:
    """Strings and numbers only; booleans, objects and arrays are not."""
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def flatten_attributes(
    attributes: Mapping[str, Any] | None, prefix: str = "browser."
) -> dict[str, Any]:
    """Namespace scalar attributes under `prefix`, dropping everything else."""
    if not attributes:
        return {}
    return {
        f"{prefix}{key}": value for key, value in attributes.items() if is_scalar(value)
    }


def _ms_to_ns(timestamp: float | None) -> int | None:
    if timestamp is None:
        return None
    return int(timestamp * 1_000_000)


class SpanMaterializer:
    """
    Turns decoded browser events into spans through SpanHelper.

    Journeys become `browser.journey.<name>` spans, standalone events
    `browser.event.<name>`. Client timestamps and durations are trusted as
    reported.
    """

    def __init__(self, span_helper: SpanHelper):
        self._spans = span_helper

    def span_name(self, event: BrowserEvent) -> str:
        payload = event.payload
        if isinstance(payload, JourneyPayload):
            return f"browser.journey.{payload.journey_name}"
        if isinstance(payload, StandaloneEventPayload):
            return f"browser.event.{payload.name}"
        return "browser.unknown_event"

    def build_attributes(
        self,
        event: BrowserEvent,
        session_id: str,
        browser_info: BrowserInfo | None = None,
    ) -> dict[str, Any]:
        """Span attributes for an event, including derived performance data."""
        attributes: dict[str, Any] = {
            "browser.session_id": session_id,
            "browser.event_priority": event.priority,
            "browser.event_timestamp": event.timestamp,
            "browser.event_type": event.event_type,
            "browser.user_agent": (browser_info and browser_info.user_agent) or "unknown",
            "browser.market_session": (browser_info and browser_info.market_session)
            or "unknown",
        }

        payload = event.payload
        if isinstance(payload, JourneyPayload):
            attributes.update(
                {
                    "browser.journey_name": payload.journey_name,
                    "browser.journey_duration": payload.duration or 0,
                    "browser.journey_status": payload.journey_status,
                    "browser.event_count": len(payload.events),
                    "browser.span_count": len(payload.spans),
                }
            )
            if payload.trace_id:
                attributes["browser.trace_id"] = payload.trace_id
            if payload.span_id:
                attributes["browser.span_id"] = payload.span_id
            attributes.update(flatten_attributes(payload.attributes))

            if payload.attributes.get("journey.status") == "completed":
                attributes.update(self._performance_attributes(payload.attributes))

        elif isinstance(payload, StandaloneEventPayload):
            attributes["browser.event_name"] = payload.name
            attributes.update(flatten_attributes(payload.attributes))

        return attributes

    @staticmethod
    def _performance_attributes(journey_attributes: Mapping[str, Any]) -> dict[str, Any]:
        performance = {
            f"performance.{key}": journey_attributes[key]
            for key in PERFORMANCE_KEYS
            if key in journey_attributes and is_scalar(journey_attributes[key])
        }
        score = calculate_performance_score(journey_attributes)
        if score is not None:
            performance["performance.score"] = score
        return performance

    def _record_journey_children(self, span: Span, payload: JourneyPayload) -> None:
        for sub_event in payload.events:
            span.add_event(
                f"browser.{sub_event.name}",
                attributes=self._event_attributes(
                    {"event_timestamp": sub_event.timestamp, **sub_event.attributes}
                ),
                timestamp=_ms_to_ns(sub_event.timestamp),
            )

        for child in payload.spans:
            child_type = child.attributes.get("span.type")
            if child_type == "api_call":
                name = "browser.api_call"
                child_attributes = {
                    "api_url": child.attributes.get("http.url"),
                    "api_method": child.attributes.get("http.method"),
                    "api_status": child.attributes.get("http.status_code"),
                    "api_duration": child.duration,
                    "api_success": child.attributes.get("api.success"),
                    "api_error_type": child.attributes.get("error.type"),
                }
            else:
                name = "browser.child_span"
                child_attributes = {
                    "span_name": child.name,
                    "span_type": child_type,
                    "span_duration": child.duration,
                }
            span.add_event(
                name,
                attributes=self._event_attributes(child_attributes),
                timestamp=_ms_to_ns(child.start_time),
            )

    @staticmethod
    def _event_attributes(attributes: Mapping[str, Any]) -> dict[str, Any]:
        # Span events carry the client values as-is, minus what OTel cannot hold.
        cleaned: dict[str, Any] = {}
        for key, value in attributes.items():
            if value is None:
                continue
            cleaned[key] = value if isinstance(value, (str, bool, int, float)) else str(value)
        return cleaned

    def materialize(
        self,
        event: BrowserEvent,
        session_id: str,
        browser_info: BrowserInfo | None = None,
    ) -> str:
        """Record one span for the event and return its name."""
        name = self.span_name(event)
        attributes = self.build_attributes(event, session_id, browser_info)

        with self._spans.span(name, attributes) as span:
            if isinstance(event.payload, JourneyPayload):
                self._record_journey_children(span, event.payload)

        if event.priority == Priority.CRITICAL.value:
            logger.error(
                "Critical browser event",
                extra={"context": {"span_name": name, "session_id": session_id}},
            )
        else:
            logger.info(
                "Browser event processed",
                extra={"context": {"span_name": name, "event_type": event.event_type}},
            )
        return name
