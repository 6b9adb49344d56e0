"""Protocols describing the collaborators of the dispatch pipeline."""

from __future__ import annotations

from .formatter import FormatterPort, TimeFormatterPort
from .sink import SinkPort
from .time import ClockPort

__all__ = [
    "ClockPort",
    "FormatterPort",
    "SinkPort",
    "TimeFormatterPort",
]
