"""Runtime state container and access helpers."""

from __future__ import annotations

from dataclasses import dataclass
from threading import RLock

from lib_log_dispatch.adapters.dispatch import DispatchEngine
from lib_log_dispatch.application.ports.sink import SinkPort

from ._settings import DispatchSettings


@dataclass(slots=True)
class DispatchRuntime:
    """Aggregate of live collaborators assembled by :func:`lib_log_dispatch.runtime.init`."""

    settings: DispatchSettings
    sink: SinkPort
    engine: DispatchEngine


_STATE: DispatchRuntime | None = None
_STATE_LOCK = RLock()


def set_runtime(runtime: DispatchRuntime) -> None:
    """Install ``runtime`` as the active singleton."""

    with _STATE_LOCK:
        global _STATE
        _STATE = runtime


def clear_runtime() -> DispatchRuntime | None:
    """Remove and return the active runtime if present."""

    with _STATE_LOCK:
        global _STATE
        runtime, _STATE = _STATE, None
        return runtime


def current_runtime() -> DispatchRuntime:
    """Return the active runtime or raise when uninitialised."""

    with _STATE_LOCK:
        if _STATE is None:
            raise RuntimeError("lib_log_dispatch.init() must be called before using the logging API")
        return _STATE


def is_initialised() -> bool:
    """Return ``True`` when :func:`lib_log_dispatch.init` has been called."""

    with _STATE_LOCK:
        return _STATE is not None


__all__ = [
    "DispatchRuntime",
    "clear_runtime",
    "current_runtime",
    "is_initialised",
    "set_runtime",
]
