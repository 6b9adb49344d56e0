"""Fan-out sink forwarding each event to several children."""

from __future__ import annotations

import threading

from lib_log_dispatch.application.ports.sink import SinkPort
from lib_log_dispatch.domain.events import LogEvent


class CompositeSink(SinkPort):
    """Forward events to every child that is still open.

    Children must be thread-safe; :meth:`accept` does not serialise them.
    """

    def __init__(self, *sinks: SinkPort) -> None:
        for sink in sinks:
            if sink is None:
                raise TypeError("CompositeSink children must not be None")
        self._sinks = tuple(sinks)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def sinks(self) -> tuple[SinkPort, ...]:
        return self._sinks

    def accept(self, event: LogEvent) -> None:
        if self._closed:
            return
        for sink in self._sinks:
            if not sink.is_closed():
                sink.accept(event)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for sink in self._sinks:
                if not sink.is_closed():
                    sink.close()

    def is_closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"CompositeSink(sinks={list(self._sinks)!r}, closed={self._closed})"


__all__ = ["CompositeSink"]
