"""Span helper module."""

from .otel_config import configure_tracing
from .span_helper import SpanHelper, clean_attributes

__all__ = ["SpanHelper", "clean_attributes", "configure_tracing"]
