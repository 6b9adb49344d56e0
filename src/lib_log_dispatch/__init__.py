"""Leveled structured logging with an asynchronous dispatch engine.

Producers build immutable :class:`LogEvent` objects and hand them to a
:class:`SinkPort`. The :class:`DispatchEngine` is such a sink: it queues
events, applies an overflow policy under load, delivers on background
threads, and drains before closing the sink it wraps.
"""

from __future__ import annotations

from .adapters import (
    CompositeSink,
    DefaultLogFormatter,
    DispatchEngine,
    FileSink,
    FilteredSink,
    ISO8601TimeFormatter,
    LocalDateTimeFormatter,
    LocalTimeFormatter,
    MemorySink,
    NullSink,
    RichConsoleSink,
    StreamSink,
)
from .application.ports import FormatterPort, SinkPort, TimeFormatterPort
from .domain import AcceptOutcome, LifecycleState, LogEvent, LogLevel, OverflowPolicy
from .runtime import (
    DispatchSettings,
    Logger,
    build_engine,
    get,
    get_logger,
    init,
    lossy,
    reliable,
    shutdown,
)

__all__ = [
    "AcceptOutcome",
    "CompositeSink",
    "DefaultLogFormatter",
    "DispatchEngine",
    "DispatchSettings",
    "FileSink",
    "FilteredSink",
    "FormatterPort",
    "ISO8601TimeFormatter",
    "LifecycleState",
    "LocalDateTimeFormatter",
    "LocalTimeFormatter",
    "LogEvent",
    "LogLevel",
    "Logger",
    "MemorySink",
    "NullSink",
    "OverflowPolicy",
    "RichConsoleSink",
    "SinkPort",
    "StreamSink",
    "TimeFormatterPort",
    "build_engine",
    "get",
    "get_logger",
    "init",
    "lossy",
    "reliable",
    "shutdown",
]
