"""Default text formatter for log events.

Why
---
Console and file sinks render the same line layout. Keeping the template
substitution, escaping, and traceback rendering in one place keeps both
outputs identical.

Contents
--------
* :class:`DefaultLogFormatter` - ``[time] [LEVEL] [thread] [logger] message``.
* :func:`render_message` - ``{}`` placeholder substitution with escapes.

Rules
-----
``{}`` consumes the next parameter (``str()`` of it); once parameters run out
the placeholder stays literal. ``\\{`` yields a literal brace and ``\\\\`` a
single backslash; any other backslash is kept. An attached error is appended
as a traceback on the following lines, and every continuation line is
indented to start under the first message character.
"""

from __future__ import annotations

import re
import traceback
from collections.abc import Sequence
from typing import Any

from lib_log_dispatch.application.ports.formatter import FormatterPort, TimeFormatterPort
from lib_log_dispatch.domain.events import LogEvent

from .time import ISO8601TimeFormatter


def render_message(template: str, params: Sequence[Any]) -> str:
    """Substitute ``{}`` placeholders in ``template`` from ``params``.

    Examples
    --------
    >>> render_message("user {} logged in from {}", ["ada", "10.0.0.1"])
    'user ada logged in from 10.0.0.1'
    >>> render_message("missing {} and {}", [1])
    'missing 1 and {}'
    >>> render_message(r"literal \\{} and \\\\ backslash", [])
    'literal {} and \\\\ backslash'
    """

    parts: list[str] = []
    remaining = iter(params)
    index = 0
    length = len(template)
    while index < length:
        char = template[index]
        nxt = template[index + 1] if index + 1 < length else ""
        if char == "\\" and nxt in ("\\", "{"):
            parts.append(nxt)
            index += 2
        elif char == "{" and nxt == "}":
            value = next(remaining, _MISSING)
            parts.append("{}" if value is _MISSING else str(value))
            index += 2
        else:
            parts.append(char)
            index += 1
    return "".join(parts)


_MISSING = object()
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def render_error(error: BaseException) -> str:
    """Return the formatted traceback for ``error``."""

    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


class DefaultLogFormatter(FormatterPort):
    """Render events as bracketed headers followed by the indented message.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> from lib_log_dispatch.domain.levels import LogLevel
    >>> event = LogEvent(datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc), LogLevel.INFO, 'svc', 'main', 'hello {}', ('world',))
    >>> DefaultLogFormatter().format(event)
    '[2025-09-30T12:00:00Z] [INFO] [main] [svc] hello world'
    >>> text = DefaultLogFormatter(show_thread_name=False).format(event.replace(message='a\\nb', params=()))
    >>> text.splitlines()[1] == ' ' * len('[2025-09-30T12:00:00Z] [INFO] [svc] ') + 'b'
    True
    """

    def __init__(self, time_formatter: TimeFormatterPort | None = None, *, show_thread_name: bool = True) -> None:
        self._time_formatter = time_formatter or ISO8601TimeFormatter()
        self._show_thread_name = show_thread_name

    def format(self, event: LogEvent) -> str:
        header = self._header(event)
        message = render_message(event.message, event.params)
        if event.error is not None:
            message = f"{message}\n{render_error(event.error)}"
        lines = _LINE_BREAK.split(message)
        if lines[-1] == "":
            lines.pop()
        if not lines:
            return header
        filler = " " * (len(header) + 1)
        return "\n".join([f"{header} {lines[0]}", *(filler + line for line in lines[1:])])

    def _header(self, event: LogEvent) -> str:
        fields = [self._time_formatter.format(event.timestamp), event.level.name]
        if self._show_thread_name:
            fields.append(event.thread_name)
        fields.append(event.logger_name)
        return " ".join(f"[{value}]" for value in fields)


__all__ = ["DefaultLogFormatter", "render_error", "render_message"]
