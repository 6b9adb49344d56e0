"""Time formatters implementing :class:`TimeFormatterPort`.

Contents
--------
* :class:`ISO8601TimeFormatter` - UTC instant, e.g. ``2025-09-30T12:00:00.250Z``.
* :class:`LocalTimeFormatter` - wall-clock ``HH:MM:SS`` in the local zone.
* :class:`LocalDateTimeFormatter` - ``YYYY-MM-DD HH:MM:SS`` in the local zone.
"""

from __future__ import annotations

from datetime import datetime, timezone

from lib_log_dispatch.application.ports.formatter import TimeFormatterPort


class ISO8601TimeFormatter(TimeFormatterPort):
    """Render timestamps as ISO-8601 UTC instants with a ``Z`` suffix.

    Examples
    --------
    >>> ISO8601TimeFormatter().format(datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc))
    '2025-09-30T12:00:00Z'
    >>> ISO8601TimeFormatter().format(datetime(2025, 9, 30, 12, 0, 0, 250000, tzinfo=timezone.utc))
    '2025-09-30T12:00:00.250Z'
    """

    def format(self, timestamp: datetime) -> str:
        utc = timestamp.astimezone(timezone.utc)
        timespec = "milliseconds" if utc.microsecond else "seconds"
        return utc.replace(tzinfo=None).isoformat(timespec=timespec) + "Z"


class LocalTimeFormatter(TimeFormatterPort):
    """Render the local wall-clock time only."""

    def format(self, timestamp: datetime) -> str:
        return timestamp.astimezone().strftime("%H:%M:%S")


class LocalDateTimeFormatter(TimeFormatterPort):
    """Render the local date and time."""

    def format(self, timestamp: datetime) -> str:
        return timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")


__all__ = ["ISO8601TimeFormatter", "LocalDateTimeFormatter", "LocalTimeFormatter"]
