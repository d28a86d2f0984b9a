"""Browser-side assembly: one telemetry client per page session."""

from typing import Callable

import httpx

from .config import TransportSettings
from .correlation import CorrelationHeaderInjector
from .logging_config import get_logger
from .models import JourneyStatus, Session
from .tracer import JourneyTracer, PageContext
from .tracer.journeys import JourneyScope
from .transport import HttpTelemetrySender, ITelemetrySender, TransportLayer

logger = get_logger(__name__)


class BrowserTelemetryClient:
    """
    Wires session, transport, tracer and correlation injector together.

    Page lifecycle hooks map onto the methods here: `visibility_changed`
    for visibility changes, `unload` for page teardown, `scope` for a UI
    element that owns journeys.
    """

    def __init__(
        self,
        page: PageContext,
        settings: TransportSettings | None = None,
        sender: ITelemetrySender | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], int] | None = None,
    ):
        self._settings = settings or TransportSettings.from_env()
        self._session = Session.create(page.user_agent, page.url, page.referrer)
        self._sender = sender or HttpTelemetrySender(
            self._settings.endpoint, timeout=self._settings.request_timeout
        )
        self.transport = TransportLayer(
            self._session, self._sender, self._settings, clock=clock
        )
        self.tracer = JourneyTracer(self._session, self.transport, page=page, clock=clock)
        self.injector = CorrelationHeaderInjector(self.tracer, client=http_client, clock=clock)

    @property
    def session(self) -> Session:
        return self._session

    async def start(self) -> None:
        await self.transport.start()
        logger.info(
            "Browser telemetry started",
            extra={"context": {"session_id": self._session.id}},
        )

    def scope(self, component_name: str) -> JourneyScope:
        return JourneyScope(self.tracer, self.injector, component_name=component_name)

    def visibility_changed(self, visible: bool) -> None:
        self.tracer.page.visible = visible
        self.tracer.add_standalone_event(
            "page.visibility_change",
            {"page.visible": visible, "event.type": "page_lifecycle"},
        )

    def unload(self) -> bool:
        """End open journeys as unmounted and beacon out what is queued."""
        ended = self.tracer.end_all(status=JourneyStatus.UNMOUNTED)
        if ended:
            logger.debug(
                "Ended open journeys on unload",
                extra={"context": {"count": ended}},
            )
        return self.transport.flush_on_teardown()

    async def aclose(self) -> None:
        """Stop timers, deliver what is left and close HTTP clients."""
        await self.transport.stop()
        await self.transport.flush()
        await self._sender.aclose()
        await self.injector.aclose()
