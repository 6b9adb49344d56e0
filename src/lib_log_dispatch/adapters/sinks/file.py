"""Append-only file sink with batched flushing.

Purpose
-------
Persist formatted events to a text file for the lifetime of the process.
I/O failures never propagate: they are handed to ``error_handler``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from lib_log_dispatch.adapters.formatting import DefaultLogFormatter
from lib_log_dispatch.application.ports.formatter import FormatterPort
from lib_log_dispatch.application.ports.sink import SinkPort
from lib_log_dispatch.domain.events import LogEvent


LOGGER = logging.getLogger(__name__)


def _log_io_error(exc: OSError) -> None:
    LOGGER.error("File sink I/O failed; event skipped", exc_info=exc)


class FileSink(SinkPort):
    """Append one formatted line per event to ``path``."""

    def __init__(
        self,
        path: Path | str,
        *,
        formatter: FormatterPort | None = None,
        flush_every: int = 1,
        error_handler: Callable[[OSError], None] | None = None,
        encoding: str = "utf-8",
    ) -> None:
        """Open ``path`` for appending, creating parent directories.

        Raises
        ------
        ValueError
            When ``flush_every`` is below 1.
        OSError
            When the file cannot be opened.
        """
        if flush_every < 1:
            raise ValueError(f"flush_every must be >= 1, got {flush_every}")
        self._path = Path(path)
        self._formatter = formatter or DefaultLogFormatter()
        self._flush_every = flush_every
        self._error_handler = error_handler or _log_io_error
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self._path.open("a", encoding=encoding)
        self._lock = threading.Lock()
        self._pending = 0
        self._closed = False

    @property
    def path(self) -> Path:
        return self._path

    def accept(self, event: LogEvent) -> None:
        # format outside the lock
        formatted = self._formatter.format(event)
        with self._lock:
            if self._closed:
                return
            try:
                self._fh.write(formatted + "\n")
                self._pending += 1
                if self._pending >= self._flush_every:
                    self._fh.flush()
                    self._pending = 0
            except OSError as exc:
                self._error_handler(exc)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                self._fh.flush()
                self._fh.close()
            except OSError as exc:
                self._error_handler(exc)

    def is_closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"FileSink(path={str(self._path)!r}, flush_every={self._flush_every}, closed={self._closed})"


__all__ = ["FileSink"]
