"""Rich-powered console sink implementing :class:`SinkPort`.

Purpose
-------
Human-facing terminal output. ERROR and FATAL events go to the error
console, everything else to the standard console, each styled per level.

Contents
--------
* :data:`_STYLE_MAP` - default level-to-style mapping.
* :class:`RichConsoleSink` - sink printing formatted events through Rich.
"""

from __future__ import annotations

import threading
from typing import Mapping

from rich.console import Console

from lib_log_dispatch.adapters.formatting import DefaultLogFormatter
from lib_log_dispatch.application.ports.formatter import FormatterPort
from lib_log_dispatch.application.ports.sink import SinkPort
from lib_log_dispatch.domain.events import LogEvent
from lib_log_dispatch.domain.levels import LogLevel


_STYLE_MAP: Mapping[LogLevel, str] = {
    LogLevel.TRACE: "dim",
    LogLevel.DEBUG: "dim",
    LogLevel.INFO: "cyan",
    LogLevel.WARN: "yellow",
    LogLevel.ERROR: "red",
    LogLevel.FATAL: "bold red",
}

#: Default Rich styles keyed by :class:`LogLevel`.


class RichConsoleSink(SinkPort):
    """Print formatted events to stdout/stderr using Rich.

    Closing stops further output but never closes the process streams.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> from io import StringIO
    >>> console = Console(file=StringIO(), record=True)
    >>> sink = RichConsoleSink(console=console)
    >>> event = LogEvent(datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc), LogLevel.INFO, 'svc', 'main', 'msg')
    >>> sink.accept(event)
    >>> 'msg' in console.export_text()
    True
    """

    def __init__(
        self,
        *,
        formatter: FormatterPort | None = None,
        console: Console | None = None,
        err_console: Console | None = None,
        force_color: bool = False,
        no_color: bool = False,
        styles: Mapping[LogLevel | str, str] | None = None,
    ) -> None:
        """Configure consoles, formatter, and style overrides.

        When only ``console`` is injected it receives the error output too.
        """
        force_terminal = True if force_color else None
        if console is not None:
            self._console = console
            self._err_console = err_console or console
        else:
            self._console = Console(force_terminal=force_terminal, no_color=no_color)
            self._err_console = err_console or Console(stderr=True, force_terminal=force_terminal, no_color=no_color)
        self._formatter = formatter or DefaultLogFormatter()
        self._no_color = no_color
        merged = dict(_STYLE_MAP)
        for key, value in (styles or {}).items():
            level = LogLevel.from_name(key) if isinstance(key, str) else key
            merged[level] = value
        self._style_map = merged
        self._lock = threading.Lock()
        self._closed = False

    def accept(self, event: LogEvent) -> None:
        if self._closed:
            return
        line = self._formatter.format(event)
        style = "" if self._no_color else self._style_map.get(event.level, "")
        target = self._err_console if event.level.is_error_stream else self._console
        target.print(line, style=style, highlight=False, markup=False, emoji=False, soft_wrap=True)

    def close(self) -> None:
        with self._lock:
            self._closed = True

    def is_closed(self) -> bool:
        return self._closed


__all__ = ["RichConsoleSink"]
