"""Named journeys for the dashboard and per-component journey scopes."""

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import httpx

from ..models import JourneyStatus
from .tracer import JourneyTracer

if TYPE_CHECKING:
    from ..correlation import CorrelationHeaderInjector


# Portfolio journeys

def view_portfolio(tracer: JourneyTracer, portfolio_id: str) -> str:
    return tracer.start_journey(
        "view_portfolio",
        {"portfolio.id": portfolio_id, "journey.category": "portfolio"},
    )


def create_portfolio(tracer: JourneyTracer) -> str:
    return tracer.start_journey("create_portfolio", {"journey.category": "portfolio"})


def refresh_portfolio(tracer: JourneyTracer, portfolio_id: str) -> str:
    return tracer.start_journey(
        "refresh_portfolio",
        {"portfolio.id": portfolio_id, "journey.category": "portfolio"},
    )


# Recommendation journeys

def view_recommendations(tracer: JourneyTracer) -> str:
    return tracer.start_journey(
        "view_recommendations", {"journey.category": "ai_recommendations"}
    )


def generate_recommendations(tracer: JourneyTracer) -> str:
    return tracer.start_journey(
        "generate_recommendations", {"journey.category": "ai_recommendations"}
    )


# Authentication journeys

def login(tracer: JourneyTracer, method: str = "form") -> str:
    trace_id = tracer.start_journey("user_login", {"journey.category": "authentication"})
    tracer.add_journey_event(
        trace_id,
        "auth.login_attempt",
        {
            "auth.method": method,
            "auth.timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
    return trace_id


def track_login_success(tracer: JourneyTracer, trace_id: str, user_id: str) -> None:
    tracer.add_journey_event(
        trace_id, "auth.login_success", {"auth.user_id": user_id, "auth.success": True}
    )
    tracer.end_journey(trace_id, {"auth.status": "success"})


def track_login_failure(tracer: JourneyTracer, trace_id: str, error: str) -> None:
    tracer.add_journey_event(
        trace_id, "auth.login_failed", {"auth.error": error, "auth.success": False}
    )
    tracer.end_journey(trace_id, {"auth.status": "failed"})


def logout(tracer: JourneyTracer) -> str:
    trace_id = tracer.start_journey("user_logout", {"journey.category": "authentication"})
    tracer.add_journey_event(
        trace_id,
        "auth.logout_initiated",
        {"auth.timestamp": datetime.now(timezone.utc).isoformat()},
    )
    return trace_id


def page_load(tracer: JourneyTracer, page_name: str) -> str:
    return tracer.start_journey(
        "page_load", {"page.name": page_name, "journey.category": "navigation"}
    )


# Domain events on an open journey

def track_portfolio_operation(
    tracer: JourneyTracer,
    trace_id: str,
    operation: str,
    portfolio_id: str,
    attributes: dict[str, Any] | None = None,
) -> None:
    tracer.add_journey_event(
        trace_id,
        "portfolio.operation",
        {
            "portfolio.operation": operation,
            "portfolio.id": portfolio_id,
            "operation.type": "financial",
            **(attributes or {}),
        },
    )


def track_stock_operation(
    tracer: JourneyTracer,
    trace_id: str,
    operation: str,
    symbols: str | list[str],
    attributes: dict[str, Any] | None = None,
) -> None:
    symbol_list = [symbols] if isinstance(symbols, str) else list(symbols)
    tracer.add_journey_event(
        trace_id,
        "stock.operation",
        {
            "stock.operation": operation,
            "stock.symbols": ",".join(symbol_list),
            "stock.symbol_count": len(symbol_list),
            "operation.type": "market_data",
            **(attributes or {}),
        },
    )


def track_financial_calculation(
    tracer: JourneyTracer,
    trace_id: str,
    calculation_type: str,
    attributes: dict[str, Any] | None = None,
) -> None:
    tracer.add_journey_event(
        trace_id,
        "financial.calculation",
        {
            "financial.calculation_type": calculation_type,
            "operation.type": "financial",
            "calculation.client_side": True,
            **(attributes or {}),
        },
    )


# Errors are recorded as short journeys of their own

def track_error(
    tracer: JourneyTracer, error: BaseException, context: dict[str, Any] | None = None
) -> str:
    context = context or {}
    trace_id = tracer.start_journey(
        "error_occurred",
        {
            "error.name": type(error).__name__,
            "error.message": str(error) or "unknown error",
            "error.context": json.dumps(context, default=str),
            "journey.category": "error",
        },
    )
    tracer.add_journey_event(
        trace_id,
        "error.captured",
        {
            "error.type": type(error).__name__,
            "error.fatal": bool(context.get("fatal", False)),
            "error.source": context.get("source", "python"),
        },
    )
    tracer.end_journey(trace_id, {"error.handled": True})
    return trace_id


def track_api_error(
    tracer: JourneyTracer,
    url: str,
    error: BaseException,
    method: str = "unknown",
    response: httpx.Response | None = None,
) -> str:
    trace_id = tracer.start_journey(
        "api_error",
        {
            "api.url": url,
            "api.error": str(error),
            "api.status": response.status_code if response is not None else "unknown",
            "journey.category": "api_error",
        },
    )
    tracer.add_journey_event(
        trace_id,
        "api.error_occurred",
        {"api.method": method, "api.error_type": type(error).__name__},
    )
    tracer.end_journey(trace_id, {"api.error_handled": True})
    return trace_id


class JourneyScope:
    """
    Journeys owned by one UI element, keyed by journey name.

    Closing the scope (the element is destroyed) ends every journey it
    still holds with status `unmounted`.

    Usage:
        with JourneyScope(tracer, injector, component_name="PortfolioPage") as scope:
            scope.start("view_portfolio", {"portfolio.id": "p1"})
            await scope.track_api_call("GET", "/api/portfolios/p1", "view_portfolio")
            scope.end("view_portfolio")
    """

    def __init__(
        self,
        tracer: JourneyTracer,
        injector: "CorrelationHeaderInjector | None" = None,
        component_name: str = "unknown",
    ):
        self._tracer = tracer
        self._injector = injector
        self._component_name = component_name
        self._active: dict[str, str] = {}

    def start(self, journey_name: str, attributes: dict[str, Any] | None = None) -> str:
        trace_id = self._tracer.start_journey(
            journey_name,
            {"component.name": self._component_name, **(attributes or {})},
        )
        if trace_id:
            self._active[journey_name] = trace_id
        return trace_id

    def end(self, journey_name: str, attributes: dict[str, Any] | None = None) -> None:
        trace_id = self._active.pop(journey_name, None)
        if trace_id:
            self._tracer.end_journey(trace_id, attributes)

    def add_event(
        self, journey_name: str, event_name: str, attributes: dict[str, Any] | None = None
    ) -> None:
        trace_id = self._active.get(journey_name)
        if trace_id:
            self._tracer.add_journey_event(trace_id, event_name, attributes)

    def trace_id(self, journey_name: str) -> str | None:
        return self._active.get(journey_name)

    async def track_api_call(
        self,
        method: str,
        url: str,
        journey_name: str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        if self._injector is None:
            raise RuntimeError("JourneyScope has no CorrelationHeaderInjector")
        trace_id = self._active.get(journey_name) if journey_name else None
        return await self._injector.request(method, url, trace_id=trace_id, **kwargs)

    @property
    def active_journeys(self) -> list[str]:
        return list(self._active)

    def close(self) -> None:
        """End all held journeys as unmounted."""
        for trace_id in self._active.values():
            self._tracer.end_journey(trace_id, status=JourneyStatus.UNMOUNTED)
        self._active.clear()

    def __enter__(self) -> "JourneyScope":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
