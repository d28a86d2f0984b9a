"""Span materializer module."""

from .materializer import (
    PERFORMANCE_KEYS,
    SpanMaterializer,
    flatten_attributes,
)
from .scoring import calculate_performance_score, performance_score

__all__ = [
    "PERFORMANCE_KEYS",
    "SpanMaterializer",
    "calculate_performance_score",
    "flatten_attributes",
    "performance_score",
]
