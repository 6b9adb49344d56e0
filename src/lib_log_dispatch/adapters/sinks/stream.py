"""Dual text-stream sink routing ERROR/FATAL to the error stream."""

from __future__ import annotations

import sys
import threading
from typing import TextIO

from lib_log_dispatch.adapters.formatting import DefaultLogFormatter
from lib_log_dispatch.application.ports.formatter import FormatterPort
from lib_log_dispatch.application.ports.sink import SinkPort
from lib_log_dispatch.domain.events import LogEvent


def _is_process_stream(stream: TextIO) -> bool:
    return any(stream is candidate for candidate in (sys.stdout, sys.stderr, sys.__stdout__, sys.__stderr__))


class StreamSink(SinkPort):
    """Write one formatted line per event to ``out`` or ``err``.

    Streams shared with the process (``sys.stdout``/``sys.stderr``) are never
    closed by :meth:`close`.
    """

    def __init__(
        self,
        out: TextIO | None = None,
        err: TextIO | None = None,
        *,
        formatter: FormatterPort | None = None,
    ) -> None:
        self._out = out if out is not None else sys.stdout
        self._err = err if err is not None else sys.stderr
        self._formatter = formatter or DefaultLogFormatter()
        self._lock = threading.Lock()
        self._closed = False

    def accept(self, event: LogEvent) -> None:
        formatted = self._formatter.format(event)
        with self._lock:
            if self._closed:
                return
            stream = self._err if event.level.is_error_stream else self._out
            stream.write(formatted + "\n")
            stream.flush()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for stream in {id(self._out): self._out, id(self._err): self._err}.values():
                if not _is_process_stream(stream):
                    stream.close()

    def is_closed(self) -> bool:
        return self._closed


__all__ = ["StreamSink"]
