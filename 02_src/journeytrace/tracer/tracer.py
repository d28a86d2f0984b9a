"""JourneyTracer: owns the table of open journeys for one page session."""

import time
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from ..logging_config import get_logger
from ..models import (
    Journey,
    JourneyEvent,
    JourneySpan,
    JourneyStatus,
    Priority,
    Session,
    generate_span_id,
    generate_trace_id,
)
from ..transport import ITransportLayer
from ..market_session import get_market_session
from .page_metrics import PageContext

logger = get_logger(__name__)

# Events that must leave the page immediately instead of waiting for a batch.
CRITICAL_EVENTS = frozenset(
    {
        "auth.login_failed",
        "auth.logout",
        "portfolio.error",
        "api.error",
        "financial.calculation_error",
    }
)


def _now_ms() -> int:
    return int(time.time() * 1000)


class IJourneyTracer(Protocol):
    """Recording of user journeys, their events and child spans."""

    def start_journey(self, name: str, attributes: dict[str, Any] | None = None) -> str:
        """Open a journey and return its trace id."""
        ...

    def add_journey_event(
        self, trace_id: str, name: str, attributes: dict[str, Any] | None = None
    ) -> None:
        """Append an event to an open journey."""
        ...

    def add_journey_span(
        self,
        trace_id: str,
        name: str,
        start_time: int,
        end_time: int,
        attributes: dict[str, Any] | None = None,
    ) -> str | None:
        """Append a child span to an open journey."""
        ...

    def end_journey(
        self,
        trace_id: str,
        attributes: dict[str, Any] | None = None,
        status: JourneyStatus = JourneyStatus.COMPLETED,
    ) -> Journey | None:
        """Finalize an open journey and hand it to the transport."""
        ...

    def get_journey(self, trace_id: str) -> Journey | None:
        """Return the open journey for a trace id."""
        ...


class JourneyTracer:
    """
    Records journeys for a single page session.

    Construct one per session. Every operation keyed by trace id is a silent
    no-op when the id does not resolve to an open journey, so tracing can
    never break the user flow that calls it.
    """

    def __init__(
        self,
        session: Session,
        transport: ITransportLayer,
        page: PageContext | None = None,
        clock: Callable[[], int] | None = None,
    ):
        self._session = session
        self._transport = transport
        self._page = page or PageContext(
            user_agent=session.user_agent, url=session.url, referrer=session.referrer
        )
        self._clock = clock or _now_ms
        self._journeys: dict[str, Journey] = {}

    @property
    def session(self) -> Session:
        return self._session

    @property
    def page(self) -> PageContext:
        return self._page

    @property
    def active_trace_ids(self) -> list[str]:
        return list(self._journeys)

    def _market_session(self, now_ms: int) -> str:
        instant = datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc)
        return get_market_session(instant).value

    def _page_timing(self) -> dict[str, Any]:
        try:
            return self._page.page_timing()
        except Exception as e:
            logger.warning("Page timing unavailable: %s", e)
            return {}

    def _final_page_metrics(self) -> dict[str, Any]:
        """Web Vitals and heap memory; whatever cannot be read is left out."""
        metrics: dict[str, Any] = {}
        for source in (self._page.web_vitals.snapshot, self._page.memory_usage):
            try:
                metrics.update(source())
            except Exception as e:
                logger.warning("Page metrics unavailable: %s", e)
        return metrics

    def get_journey(self, trace_id: str) -> Journey | None:
        return self._journeys.get(trace_id)

    def start_journey(self, name: str, attributes: dict[str, Any] | None = None) -> str:
        """
        Open a new journey.

        Snapshots page-load timing and the market session, then merges the
        caller's attributes on top of the defaults.

        An empty or non-string name is logged and yields "", an id that
        resolves to nothing, so follow-up calls become no-ops.
        """
        if not isinstance(name, str) or not name.strip():
            logger.warning("Journey not started: invalid name %r", name)
            return ""

        now = self._clock()
        trace_id = generate_trace_id()
        journey = Journey(
            trace_id=trace_id,
            span_id=generate_span_id(),
            name=name,
            start_time=now,
            attributes={
                "user.session_id": self._session.id,
                "journey.type": "user_interaction",
                "browser.user_agent": self._page.user_agent,
                "browser.url": self._page.url,
                "browser.referrer": self._page.referrer,
                "market.session": self._market_session(now),
                "timestamp": datetime.fromtimestamp(
                    now / 1000, tz=timezone.utc
                ).isoformat(),
                **self._page_timing(),
                **(attributes or {}),
            },
        )
        self._journeys[trace_id] = journey
        logger.debug("Journey started: %s (%s)", name, trace_id)
        return trace_id

    def add_journey_event(
        self, trace_id: str, name: str, attributes: dict[str, Any] | None = None
    ) -> None:
        """Append an event; critical events are also sent out-of-band."""
        journey = self._journeys.get(trace_id)
        if journey is None:
            return

        now = self._clock()
        priority = Priority.CRITICAL if name in CRITICAL_EVENTS else Priority.NORMAL
        event = JourneyEvent(
            name=name,
            timestamp=now,
            attributes={
                "event.type": "user_action",
                "market.session": self._market_session(now),
                **(attributes or {}),
            },
            priority=priority,
        )
        journey.events.append(event)

        if priority is Priority.CRITICAL:
            payload = event.to_payload()
            payload["attributes"].update(
                {"journey.trace_id": trace_id, "journey.name": journey.name}
            )
            self._transport.enqueue(payload, Priority.CRITICAL)

    def add_journey_span(
        self,
        trace_id: str,
        name: str,
        start_time: int,
        end_time: int,
        attributes: dict[str, Any] | None = None,
    ) -> str | None:
        """Append a child span and return its span id."""
        journey = self._journeys.get(trace_id)
        if journey is None:
            return None

        span = JourneySpan(
            span_id=generate_span_id(),
            name=name,
            start_time=start_time,
            end_time=max(end_time, start_time),
            attributes={
                "span.type": "api_call",
                "market.session": self._market_session(start_time),
                **(attributes or {}),
            },
        )
        journey.spans.append(span)
        return span.span_id

    def end_journey(
        self,
        trace_id: str,
        attributes: dict[str, Any] | None = None,
        status: JourneyStatus = JourneyStatus.COMPLETED,
    ) -> Journey | None:
        """
        Finalize a journey and queue it for delivery.

        The journey leaves the active table here, so a second call for the
        same id finds nothing and does nothing.
        """
        journey = self._journeys.pop(trace_id, None)
        if journey is None:
            return None

        journey.end_time = max(self._clock(), journey.start_time)
        journey.attributes = {
            **journey.attributes,
            "journey.duration_ms": journey.duration,
            "journey.status": status.value,
            **(attributes or {}),
            **self._final_page_metrics(),
        }
        try:
            journey.status = JourneyStatus(journey.attributes["journey.status"])
        except ValueError:
            journey.status = status

        self._transport.enqueue(journey.to_payload(), Priority.NORMAL)
        logger.debug(
            "Journey ended: %s (%s) after %sms",
            journey.name,
            trace_id,
            journey.duration,
        )
        return journey

    def end_all(
        self,
        attributes: dict[str, Any] | None = None,
        status: JourneyStatus = JourneyStatus.UNMOUNTED,
    ) -> int:
        """End every open journey, e.g. on page unload. Returns the count."""
        trace_ids = list(self._journeys)
        for trace_id in trace_ids:
            self.end_journey(trace_id, attributes, status=status)
        return len(trace_ids)

    def add_standalone_event(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
        priority: Priority = Priority.NORMAL,
    ) -> None:
        """Queue an event that belongs to no journey (page lifecycle etc)."""
        now = self._clock()
        self._transport.enqueue(
            {
                "name": name,
                "timestamp": now,
                "attributes": {
                    "user.session_id": self._session.id,
                    "market.session": self._market_session(now),
                    **(attributes or {}),
                },
            },
            priority,
        )
