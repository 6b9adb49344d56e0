"""Adapter implementations: the dispatch engine, sinks, and formatters."""

from __future__ import annotations

from .clock import SystemClock
from .dispatch import DispatchEngine
from .formatting import (
    DefaultLogFormatter,
    ISO8601TimeFormatter,
    LocalDateTimeFormatter,
    LocalTimeFormatter,
)
from .sinks import (
    CompositeSink,
    FileSink,
    FilteredSink,
    MemorySink,
    NullSink,
    RichConsoleSink,
    StreamSink,
)

__all__ = [
    "CompositeSink",
    "DefaultLogFormatter",
    "DispatchEngine",
    "FileSink",
    "FilteredSink",
    "ISO8601TimeFormatter",
    "LocalDateTimeFormatter",
    "LocalTimeFormatter",
    "MemorySink",
    "NullSink",
    "RichConsoleSink",
    "StreamSink",
    "SystemClock",
]
