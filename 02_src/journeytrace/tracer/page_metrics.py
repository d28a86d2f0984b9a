"""Page context: load timing, Web Vitals observers and heap memory."""

from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(frozen=True)
class NavigationTiming:
    """Raw navigation timing marks (epoch ms, 0 when unavailable)."""

    navigation_start: float = 0
    redirect_start: float = 0
    redirect_end: float = 0
    domain_lookup_start: float = 0
    domain_lookup_end: float = 0
    connect_start: float = 0
    connect_end: float = 0
    response_start: float = 0
    response_end: float = 0
    dom_content_loaded_end: float = 0
    load_event_end: float = 0
    navigation_type: str = "unknown"

    @staticmethod
    def _span(start: float, end: float) -> float:
        # Missing marks or a load still in progress read as 0, never negative.
        if not start or not end or end < start:
            return 0
        return end - start

    def durations(self) -> dict[str, Any]:
        """Flat page-load metrics as attached to every journey."""
        return {
            "navigation_type": self.navigation_type,
            "redirect_time": self._span(self.redirect_start, self.redirect_end),
            "dns_time": self._span(self.domain_lookup_start, self.domain_lookup_end),
            "connect_time": self._span(self.connect_start, self.connect_end),
            "response_time": self._span(self.response_start, self.response_end),
            "dom_ready_time": self._span(
                self.navigation_start, self.dom_content_loaded_end
            ),
            "load_time": self._span(self.navigation_start, self.load_event_end),
        }


class WebVitals:
    """
    Accumulates Core Web Vitals from passive performance observer entries.

    LCP keeps the latest candidate, FID the latest first-input delay and CLS
    sums layout shifts that were not caused by recent user input.
    """

    def __init__(self) -> None:
        self.lcp: float | None = None
        self.fid: float | None = None
        self.cls: float | None = None

    def observe_largest_contentful_paint(
        self, render_time: float | None, load_time: float | None = None
    ) -> None:
        value = render_time or load_time
        if value is not None:
            self.lcp = value

    def observe_first_input(self, processing_start: float, start_time: float) -> None:
        self.fid = processing_start - start_time

    def observe_layout_shift(self, value: float, had_recent_input: bool = False) -> None:
        if had_recent_input:
            return
        self.cls = (self.cls or 0.0) + value

    def snapshot(self) -> dict[str, float]:
        vitals: dict[str, float] = {}
        if self.lcp is not None:
            vitals["lcp"] = self.lcp
        if self.fid is not None:
            vitals["fid"] = self.fid
        if self.cls is not None:
            vitals["cls"] = self.cls
        return vitals


@dataclass(frozen=True)
class HeapMemory:
    used_heap_size: int
    total_heap_size: int
    heap_size_limit: int

    def to_attributes(self) -> dict[str, int]:
        return {
            "memory.used_heap_size": self.used_heap_size,
            "memory.total_heap_size": self.total_heap_size,
            "memory.heap_size_limit": self.heap_size_limit,
        }


@dataclass
class PageContext:
    """What the tracer can observe about the page it runs in."""

    user_agent: str = "unknown"
    url: str = ""
    referrer: str = ""
    navigation: NavigationTiming = field(default_factory=NavigationTiming)
    web_vitals: WebVitals = field(default_factory=WebVitals)
    memory_probe: Callable[[], HeapMemory | None] | None = None
    visible: bool = True

    def page_timing(self) -> dict[str, Any]:
        return self.navigation.durations()

    def memory_usage(self) -> dict[str, int]:
        """Heap attributes when the runtime exposes them, else empty."""
        if self.memory_probe is None:
            return {}
        memory = self.memory_probe()
        return memory.to_attributes() if memory else {}
