"""Sink discarding every event."""

from __future__ import annotations

from lib_log_dispatch.application.ports.sink import SinkPort
from lib_log_dispatch.domain.events import LogEvent


class NullSink(SinkPort):
    """Accept and discard; never reports itself closed."""

    def accept(self, event: LogEvent) -> None:
        return None

    def close(self) -> None:
        return None

    def is_closed(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NullSink()"


__all__ = ["NullSink"]
