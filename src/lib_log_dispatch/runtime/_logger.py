"""Producer façade turning call-site arguments into :class:`LogEvent` objects."""

from __future__ import annotations

import logging
import threading
from typing import Any

from lib_log_dispatch.adapters.clock import SystemClock
from lib_log_dispatch.application.ports.sink import SinkPort
from lib_log_dispatch.application.ports.time import ClockPort
from lib_log_dispatch.domain import LogEvent, LogLevel


LOGGER = logging.getLogger(__name__)


class Logger:
    """Build events for ``name`` and forward them to ``sink``.

    Calls are no-ops once the sink is closed or when the level is below
    ``min_level``. Building an event performs no I/O, and sink failures are
    reported through :mod:`logging` instead of reaching the caller.

    Examples
    --------
    >>> from lib_log_dispatch.adapters.sinks import MemorySink
    >>> sink = MemorySink()
    >>> log = Logger("svc", sink, min_level="info")
    >>> log.debug("hidden")
    >>> log.info("user {} logged in", "ada")
    >>> [(event.level.name, event.message, event.params) for event in sink.events]
    [('INFO', 'user {} logged in', ('ada',))]
    """

    def __init__(
        self,
        name: str,
        sink: SinkPort,
        *,
        min_level: LogLevel | str = LogLevel.TRACE,
        clock: ClockPort | None = None,
    ) -> None:
        if name is None:
            raise TypeError("logger name must not be None")
        if sink is None:
            raise TypeError("logger sink must not be None")
        self._name = name
        self._sink = sink
        self._min_level = LogLevel.from_name(min_level) if isinstance(min_level, str) else min_level
        self._clock = clock or SystemClock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def sink(self) -> SinkPort:
        return self._sink

    @property
    def min_level(self) -> LogLevel:
        return self._min_level

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level >= self._min_level and not self._sink.is_closed()

    def log(self, level: LogLevel | str, message: str, *params: Any, error: BaseException | None = None) -> None:
        """Emit ``message`` at ``level``; ``{}`` placeholders take ``params``."""
        if isinstance(level, str):
            level = LogLevel.from_name(level)
        if not self.is_enabled_for(level):
            return
        try:
            event = LogEvent(
                timestamp=self._clock.now(),
                level=level,
                logger_name=self._name,
                thread_name=threading.current_thread().name,
                message=str(message),
                params=params,
                error=error,
            )
            self._sink.accept(event)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Logger %s failed to dispatch an event", self._name, exc_info=exc)

    def trace(self, message: str, *params: Any, error: BaseException | None = None) -> None:
        self.log(LogLevel.TRACE, message, *params, error=error)

    def debug(self, message: str, *params: Any, error: BaseException | None = None) -> None:
        self.log(LogLevel.DEBUG, message, *params, error=error)

    def info(self, message: str, *params: Any, error: BaseException | None = None) -> None:
        self.log(LogLevel.INFO, message, *params, error=error)

    def warn(self, message: str, *params: Any, error: BaseException | None = None) -> None:
        self.log(LogLevel.WARN, message, *params, error=error)

    def error(self, message: str, *params: Any, error: BaseException | None = None) -> None:
        self.log(LogLevel.ERROR, message, *params, error=error)

    def fatal(self, message: str, *params: Any, error: BaseException | None = None) -> None:
        self.log(LogLevel.FATAL, message, *params, error=error)

    def close(self) -> None:
        """Close the underlying sink (draining it when it is an engine)."""
        self._sink.close()

    def is_closed(self) -> bool:
        return self._sink.is_closed()

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Logger(name={self._name!r}, min_level={self._min_level.name}, sink={self._sink!r})"


__all__ = ["Logger"]
