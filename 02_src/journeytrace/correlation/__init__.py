"""Correlation module."""

from .injector import CorrelationHeaderInjector

__all__ = ["CorrelationHeaderInjector"]
