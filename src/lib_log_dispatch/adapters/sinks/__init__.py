"""Synchronous sinks: terminal writers and pass-through combinators."""

from __future__ import annotations

from .composite import CompositeSink
from .console import RichConsoleSink
from .file import FileSink
from .filtered import FilteredSink
from .memory import MemorySink
from .null import NullSink
from .stream import StreamSink

__all__ = [
    "CompositeSink",
    "FileSink",
    "FilteredSink",
    "MemorySink",
    "NullSink",
    "RichConsoleSink",
    "StreamSink",
]
