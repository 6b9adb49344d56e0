"""Runtime façade wiring producers to the dispatch engine.

Purpose
-------
Expose a stable entry point (``init``, ``get``, ``shutdown``) plus the
building blocks (``Logger``, ``DispatchSettings``, presets) that host
applications use instead of assembling adapters by hand.

Contents
--------
* ``init`` - composition root: resolves settings, wraps the sink in an engine.
* ``get`` - logger bound to the active engine.
* ``shutdown`` - closes the active engine (drain, then downstream close).
* ``get_logger`` - standalone logger over any sink, optionally wrapped.
* Presets ``reliable`` / ``lossy`` and :func:`build_engine`.

System Role
-----------
Outer shell of the layering: application code depends on this module; the
engine, sinks, and formatters stay swappable behind it.
"""

from __future__ import annotations

from typing import Any, Callable

from lib_log_dispatch.adapters.dispatch import DispatchEngine
from lib_log_dispatch.adapters.sinks import RichConsoleSink
from lib_log_dispatch.application.ports.sink import SinkPort
from lib_log_dispatch.domain import LogLevel

from ._logger import Logger
from ._presets import build_engine, lossy, lossy_settings, reliable, reliable_settings
from ._settings import ENV_PREFIX, DispatchSettings
from ._state import DispatchRuntime, clear_runtime, current_runtime, is_initialised, set_runtime


DiagnosticHook = Callable[[str, dict[str, Any]], None] | None


def init(
    settings: DispatchSettings | None = None,
    *,
    sink: SinkPort | None = None,
    name: str = "lib_log_dispatch",
    diagnostic: DiagnosticHook = None,
    **overrides: Any,
) -> DispatchEngine:
    """Compose the process-wide dispatch runtime.

    ``settings`` defaults to :meth:`DispatchSettings.from_env` applied to
    ``overrides``; explicit ``settings`` get ``overrides`` applied on top.
    ``sink`` defaults to a :class:`RichConsoleSink`.

    Raises
    ------
    RuntimeError
        When a runtime is already active; call :func:`shutdown` first.
    """

    if is_initialised():
        raise RuntimeError(
            "lib_log_dispatch.init() cannot be called twice without shutdown(); call lib_log_dispatch.shutdown() first",
        )
    if settings is None:
        resolved = DispatchSettings.from_env(**overrides)
    else:
        resolved = settings.with_overrides(**overrides) if overrides else settings
    downstream = sink if sink is not None else RichConsoleSink()
    engine = build_engine(downstream, resolved, name=name, diagnostic=diagnostic)
    set_runtime(DispatchRuntime(settings=resolved, sink=downstream, engine=engine))
    return engine


def get(name: str) -> Logger:
    """Return a logger bound to the active runtime's engine."""

    runtime = current_runtime()
    return Logger(name, runtime.engine, min_level=runtime.settings.min_level)


def shutdown() -> None:
    """Close the active engine; a no-op when nothing is initialised."""

    runtime = clear_runtime()
    if runtime is not None:
        runtime.engine.close()


def get_logger(
    name: str,
    sink: SinkPort | None = None,
    *,
    settings: DispatchSettings | None = None,
    min_level: LogLevel | str | None = None,
) -> Logger:
    """Return a standalone logger.

    With ``settings`` (or without ``sink``) the sink is wrapped in a fresh
    engine; otherwise events go to ``sink`` directly.
    """

    target: SinkPort
    if settings is not None or sink is None:
        settings = settings if settings is not None else DispatchSettings.from_env()
        target = build_engine(sink if sink is not None else RichConsoleSink(), settings, name=name)
    else:
        target = sink
    if min_level is None:
        min_level = settings.min_level if settings is not None else LogLevel.TRACE
    return Logger(name, target, min_level=min_level)


__all__ = [
    "DispatchRuntime",
    "DispatchSettings",
    "ENV_PREFIX",
    "Logger",
    "build_engine",
    "current_runtime",
    "get",
    "get_logger",
    "init",
    "is_initialised",
    "lossy",
    "lossy_settings",
    "reliable",
    "reliable_settings",
    "shutdown",
]
