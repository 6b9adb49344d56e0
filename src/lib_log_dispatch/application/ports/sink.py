"""Sink port shared by synchronous writers and the dispatch engine.

Purpose
-------
Define the narrow capability every stage of the pipeline speaks, so the
asynchronous engine composes transparently with console, file, filter, and
composite sinks.

Contents
--------
* :class:`SinkPort` - runtime-checkable protocol with ``accept``, ``close``,
  and ``is_closed``.

System Role
-----------
Both consumed and produced by :class:`lib_log_dispatch.adapters.DispatchEngine`:
it wraps a downstream ``SinkPort`` and is itself a ``SinkPort``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_dispatch.domain.events import LogEvent


@runtime_checkable
class SinkPort(Protocol):
    """Accept log events and release resources on close."""

    def accept(self, event: LogEvent) -> None:
        """Consume ``event``; must not raise for well-formed input."""

    def close(self) -> None:
        """Release resources; calling more than once has no further effect."""

    def is_closed(self) -> bool:
        """Return ``True`` once :meth:`close` has taken effect."""


__all__ = ["SinkPort"]
