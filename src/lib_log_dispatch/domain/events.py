"""Domain event describing a single logging call.

Purpose
-------
Provide an immutable representation of a log call that can cross the
dispatch queue boundary without copying.

Contents
--------
* :class:`LogEvent` dataclass with helper methods.
* Utility function ``_ensure_aware`` for timestamp validation.

System Role
-----------
Sits in the domain layer; producers build events, the dispatch engine moves
them between threads, and sinks/formatters render them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from .levels import LogLevel


def _ensure_aware(ts: datetime) -> datetime:
    """Validate that ``ts`` is timezone-aware and normalise to UTC."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        raise ValueError("timestamp must be timezone-aware")
    return ts.astimezone(timezone.utc)


@dataclass(slots=True, frozen=True)
class LogEvent:
    """Immutable log event transported through the dispatch pipeline.

    Attributes
    ----------
    timestamp:
        Time of the call in timezone-aware UTC.
    level:
        :class:`LogLevel` severity of the call.
    logger_name:
        Logical logger that produced the event.
    thread_name:
        Name of the producing thread.
    message:
        Message template; ``{}`` placeholders are substituted from ``params``
        by the formatter. A pre-rendered message simply carries no params.
    params:
        Ordered substitution parameters, stored as a tuple.
    error:
        Optional exception rendered as a traceback after the message.

    Examples
    --------
    >>> boom = RuntimeError("boom")
    >>> event = LogEvent(datetime(2025, 1, 1, tzinfo=timezone.utc), LogLevel.ERROR, "svc", "main", "failed {}", ("job", boom))
    >>> event.params, event.error is boom
    (('job',), True)
    """

    timestamp: datetime
    level: LogLevel
    logger_name: str
    thread_name: str
    message: str
    params: tuple[Any, ...] = field(default_factory=tuple)
    error: BaseException | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", _ensure_aware(self.timestamp))
        if not isinstance(self.level, LogLevel):
            raise TypeError("level must be a LogLevel")
        params = tuple(self.params)
        if self.error is None and params and isinstance(params[-1], BaseException):
            object.__setattr__(self, "error", params[-1])
            params = params[:-1]
        object.__setattr__(self, "params", params)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the event to a dictionary with an ISO8601 timestamp."""

        data: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.severity,
            "logger_name": self.logger_name,
            "thread_name": self.thread_name,
            "message": self.message,
            "params": [str(param) for param in self.params],
        }
        if self.error is not None:
            data["error"] = repr(self.error)
        return data

    def replace(self, **changes: Any) -> "LogEvent":
        """Return a copied event with ``changes`` applied."""

        return replace(self, **changes)


__all__ = ["LogEvent"]
