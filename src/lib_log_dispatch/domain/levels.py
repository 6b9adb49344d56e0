"""Severity levels understood by the dispatch pipeline.

Purpose
-------
Offer an ordered severity enum so producers can filter by threshold and
sinks can route ERROR/FATAL output to the error stream.

Contents
--------
* :class:`LogLevel` enum with ordering, name coercion, and routing helpers.

System Role
-----------
Leaf domain type shared by events, sinks, formatters, and the producer.
"""

from __future__ import annotations

from enum import Enum
from functools import total_ordering


@total_ordering
class LogLevel(Enum):
    """Ordered logging levels ``TRACE < DEBUG < INFO < WARN < ERROR < FATAL``."""

    TRACE = 5
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40
    FATAL = 50

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.value < other.value

    @property
    def severity(self) -> str:
        """Return the lowercase severity name for structured payloads."""

        return self.name.lower()

    @property
    def is_error_stream(self) -> bool:
        """Return ``True`` when output for this level belongs on stderr.

        Examples
        --------
        >>> LogLevel.ERROR.is_error_stream, LogLevel.WARN.is_error_stream
        (True, False)
        """

        return self.value >= LogLevel.ERROR.value

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Coerce ``name`` (case-insensitive, stdlib aliases allowed) to a level.

        Examples
        --------
        >>> LogLevel.from_name("warning")
        <LogLevel.WARN: 30>
        """

        normalized = name.strip().upper()
        normalized = _ALIASES.get(normalized, normalized)
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc


_ALIASES = {
    "WARNING": "WARN",
    "CRITICAL": "FATAL",
}
# Stdlib spellings accepted by :meth:`LogLevel.from_name`.


__all__ = ["LogLevel"]
