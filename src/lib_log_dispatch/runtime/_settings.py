"""Dispatch settings and environment overrides.

Purpose
-------
Collect every knob of the dispatch engine in one validated value object and
resolve ``LOG_DISPATCH_*`` environment overrides the way the runtime façade
expects: environment values win over call arguments.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Mapping

from lib_log_dispatch.domain import LogLevel, OverflowPolicy


ENV_PREFIX = "LOG_DISPATCH_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(slots=True, frozen=True)
class DispatchSettings:
    """Validated configuration for a :class:`DispatchEngine` and its producers.

    Attributes
    ----------
    capacity:
        ``0`` for an unbounded queue, otherwise the queue bound.
    policy:
        Overflow policy for a full bounded queue.
    workers:
        Consumer thread count.
    daemon:
        Whether workers may be abandoned at process exit.
    close_timeout:
        Seconds ``close()`` waits for the drain; ``None`` waits forever.
    drop_report_interval:
        Minimum seconds between drop-report events.
    poll_interval:
        Bounded wait of a worker for the next event.
    min_level:
        Threshold applied by producers before events reach any sink.
    """

    capacity: int = 1024
    policy: OverflowPolicy = OverflowPolicy.DROP_NEW
    workers: int = 1
    daemon: bool = True
    close_timeout: float | None = 5.0
    drop_report_interval: float = 10.0
    poll_interval: float = 0.1
    min_level: LogLevel = LogLevel.TRACE

    def __post_init__(self) -> None:
        if isinstance(self.policy, str):
            object.__setattr__(self, "policy", OverflowPolicy.from_name(self.policy))
        if isinstance(self.min_level, str):
            object.__setattr__(self, "min_level", LogLevel.from_name(self.min_level))
        if self.capacity < 0:
            raise ValueError(f"capacity must be >= 0 (0 means unbounded), got {self.capacity}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.close_timeout is not None and self.close_timeout <= 0:
            raise ValueError(f"close_timeout must be positive or None, got {self.close_timeout}")
        if self.drop_report_interval <= 0:
            raise ValueError(f"drop_report_interval must be positive, got {self.drop_report_interval}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")

    @property
    def bounded(self) -> bool:
        return self.capacity > 0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "DispatchSettings":
        """Build settings from ``overrides`` with ``LOG_DISPATCH_*`` values on top.

        Examples
        --------
        >>> DispatchSettings.from_env({"LOG_DISPATCH_POLICY": "drop-old"}, capacity=8).policy
        <OverflowPolicy.DROP_OLD: 'drop_old'>
        """

        env = os.environ if environ is None else environ
        values: dict[str, Any] = dict(overrides)
        for field_name, parser in _ENV_PARSERS.items():
            variable = ENV_PREFIX + field_name.upper()
            raw = env.get(variable)
            if raw is None or not raw.strip():
                continue
            values[field_name] = parser(variable, raw.strip())
        unknown = set(values) - {item.name for item in fields(cls)}
        if unknown:
            raise TypeError(f"Unknown dispatch settings: {', '.join(sorted(unknown))}")
        return cls(**values)

    def with_overrides(self, **changes: Any) -> "DispatchSettings":
        """Return a copy with ``changes`` applied and re-validated."""

        return replace(self, **changes)


def _parse_int(variable: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{variable} must be an integer, got {raw!r}") from exc


def _parse_float(variable: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{variable} must be a number of seconds, got {raw!r}") from exc


def _parse_optional_float(variable: str, raw: str) -> float | None:
    if raw.lower() in {"none", "never", "inf"}:
        return None
    return _parse_float(variable, raw)


def _parse_bool(variable: str, raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{variable} must be a boolean flag (1/0, true/false), got {raw!r}")


def _parse_policy(variable: str, raw: str) -> OverflowPolicy:
    try:
        return OverflowPolicy.from_name(raw)
    except ValueError as exc:
        raise ValueError(f"{variable}: {exc}") from exc


def _parse_level(variable: str, raw: str) -> LogLevel:
    try:
        return LogLevel.from_name(raw)
    except ValueError as exc:
        raise ValueError(f"{variable}: {exc}") from exc


_ENV_PARSERS: dict[str, Callable[[str, str], Any]] = {
    "capacity": _parse_int,
    "policy": _parse_policy,
    "workers": _parse_int,
    "daemon": _parse_bool,
    "close_timeout": _parse_optional_float,
    "drop_report_interval": _parse_float,
    "poll_interval": _parse_float,
    "min_level": _parse_level,
}
# Field name -> parser; the variable name is ``LOG_DISPATCH_<FIELD>``.


__all__ = ["DispatchSettings", "ENV_PREFIX"]
