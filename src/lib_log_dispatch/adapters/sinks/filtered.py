"""Predicate-gated pass-through sink."""

from __future__ import annotations

from collections.abc import Callable

from lib_log_dispatch.application.ports.sink import SinkPort
from lib_log_dispatch.domain.events import LogEvent
from lib_log_dispatch.domain.levels import LogLevel


class FilteredSink(SinkPort):
    """Forward an event to ``sink`` only when ``predicate(event)`` holds.

    Examples
    --------
    >>> from lib_log_dispatch.adapters.sinks.memory import MemorySink
    >>> target = MemorySink()
    >>> gated = FilteredSink.min_level(target, LogLevel.WARN)
    >>> gated.is_closed()
    False
    """

    def __init__(self, sink: SinkPort, predicate: Callable[[LogEvent], bool]) -> None:
        if sink is None or predicate is None:
            raise TypeError("FilteredSink requires a sink and a predicate")
        self._sink = sink
        self._predicate = predicate

    @classmethod
    def min_level(cls, sink: SinkPort, level: LogLevel | str) -> "FilteredSink":
        """Return a filter passing events at or above ``level``."""

        threshold = LogLevel.from_name(level) if isinstance(level, str) else level
        return cls(sink, lambda event: event.level >= threshold)

    def accept(self, event: LogEvent) -> None:
        if self._predicate(event):
            self._sink.accept(event)

    def close(self) -> None:
        self._sink.close()

    def is_closed(self) -> bool:
        return self._sink.is_closed()

    def __repr__(self) -> str:
        return f"FilteredSink(sink={self._sink!r})"


__all__ = ["FilteredSink"]
