"""Named engine configurations trading memory bounds against delivery.

Contents
--------
* :func:`reliable_settings` / :func:`reliable` - unbounded queue, several
  non-daemon workers. Every accepted event is delivered if ``close()``
  completes; memory grows without limit under sustained overload and there
  is no ordering across workers.
* :func:`lossy_settings` / :func:`lossy` - bounded queue, one daemon worker,
  ``DROP_NEW``. Memory stays bounded and per-producer FIFO order holds;
  overload drops events and the drop counter exposes how many.
* :func:`build_engine` - engine from arbitrary :class:`DispatchSettings`.
"""

from __future__ import annotations

from typing import Any, Callable

from lib_log_dispatch.adapters.dispatch import DispatchEngine
from lib_log_dispatch.application.ports.sink import SinkPort
from lib_log_dispatch.domain import OverflowPolicy

from ._settings import DispatchSettings


def reliable_settings(*, workers: int = 4, close_timeout: float | None = 5.0) -> DispatchSettings:
    return DispatchSettings(capacity=0, workers=workers, daemon=False, close_timeout=close_timeout)


def lossy_settings(*, capacity: int = 1024) -> DispatchSettings:
    if capacity < 1:
        raise ValueError(f"lossy mode needs a bounded queue, got capacity={capacity}")
    return DispatchSettings(capacity=capacity, policy=OverflowPolicy.DROP_NEW, workers=1, daemon=True)


def build_engine(
    sink: SinkPort,
    settings: DispatchSettings,
    *,
    name: str | None = None,
    diagnostic: Callable[[str, dict[str, Any]], None] | None = None,
    **engine_options: Any,
) -> DispatchEngine:
    """Create a :class:`DispatchEngine` around ``sink`` from ``settings``."""

    return DispatchEngine(
        sink,
        capacity=settings.capacity,
        policy=settings.policy,
        workers=settings.workers,
        daemon=settings.daemon,
        close_timeout=settings.close_timeout,
        drop_report_interval=settings.drop_report_interval,
        poll_interval=settings.poll_interval,
        name=name,
        diagnostic=diagnostic,
        **engine_options,
    )


def reliable(sink: SinkPort, *, workers: int = 4, close_timeout: float | None = 5.0, **engine_options: Any) -> DispatchEngine:
    return build_engine(sink, reliable_settings(workers=workers, close_timeout=close_timeout), **engine_options)


def lossy(sink: SinkPort, *, capacity: int = 1024, **engine_options: Any) -> DispatchEngine:
    return build_engine(sink, lossy_settings(capacity=capacity), **engine_options)


__all__ = ["build_engine", "lossy", "lossy_settings", "reliable", "reliable_settings"]
