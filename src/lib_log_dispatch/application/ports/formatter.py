"""Ports for rendering events and timestamps to text."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from lib_log_dispatch.domain.events import LogEvent


@runtime_checkable
class FormatterPort(Protocol):
    """Render a log event to a single (possibly multi-line) string."""

    def format(self, event: LogEvent) -> str: ...


@runtime_checkable
class TimeFormatterPort(Protocol):
    """Render a timezone-aware timestamp."""

    def format(self, timestamp: datetime) -> str: ...


__all__ = ["FormatterPort", "TimeFormatterPort"]
