"""Text formatters for events and timestamps."""

from __future__ import annotations

from .default import DefaultLogFormatter, render_error, render_message
from .time import ISO8601TimeFormatter, LocalDateTimeFormatter, LocalTimeFormatter

__all__ = [
    "DefaultLogFormatter",
    "ISO8601TimeFormatter",
    "LocalDateTimeFormatter",
    "LocalTimeFormatter",
    "render_error",
    "render_message",
]
