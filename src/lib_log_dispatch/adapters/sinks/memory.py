"""In-memory recording sink for diagnostics and tests."""

from __future__ import annotations

import threading

from lib_log_dispatch.application.ports.sink import SinkPort
from lib_log_dispatch.domain.events import LogEvent


class MemorySink(SinkPort):
    """Record accepted events and the number of :meth:`close` calls.

    Examples
    --------
    >>> sink = MemorySink()
    >>> sink.close(); sink.close()
    >>> sink.closed, sink.close_calls
    (True, 2)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[LogEvent] = []
        self._close_calls = 0
        self._closed = False

    def accept(self, event: LogEvent) -> None:
        with self._lock:
            self._events.append(event)

    def close(self) -> None:
        with self._lock:
            self._close_calls += 1
            self._closed = True

    def is_closed(self) -> bool:
        return self._closed

    @property
    def events(self) -> list[LogEvent]:
        """Return a copy of the recorded events in arrival order."""
        with self._lock:
            return list(self._events)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def close_calls(self) -> int:
        return self._close_calls


__all__ = ["MemorySink"]
