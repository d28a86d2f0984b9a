"""Core Web Vitals performance score."""

from typing import Any, Mapping

# (poor threshold, poor penalty, needs-improvement threshold, penalty)
LCP_THRESHOLDS = (4000, 30, 2500, 15)  # ms
FID_THRESHOLDS = (300, 25, 100, 10)  # ms
CLS_THRESHOLDS = (0.25, 20, 0.1, 10)


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _penalty(value: float | None, thresholds: tuple[float, int, float, int]) -> int:
    if not value:
        return 0
    poor, poor_penalty, fair, fair_penalty = thresholds
    if value > poor:
        return poor_penalty
    if value > fair:
        return fair_penalty
    return 0


def performance_score(
    lcp: float | None = None, fid: float | None = None, cls: float | None = None
) -> int:
    """
    Score 0-100 from Largest Contentful Paint, First Input Delay and
    Cumulative Layout Shift. Missing metrics cost nothing.

    >>> performance_score(1000, 50, 0.05)
    100
    >>> performance_score(5000, 400, 0.3)
    25
    """
    score = 100
    score -= _penalty(lcp, LCP_THRESHOLDS)
    score -= _penalty(fid, FID_THRESHOLDS)
    score -= _penalty(cls, CLS_THRESHOLDS)
    return max(0, score)


def calculate_performance_score(attributes: Mapping[str, Any] | None) -> int | None:
    """Score a journey's attribute map; None when there is no map at all."""
    if attributes is None:
        return None
    return performance_score(
        _number(attributes.get("lcp")),
        _number(attributes.get("fid")),
        _number(attributes.get("cls")),
    )
