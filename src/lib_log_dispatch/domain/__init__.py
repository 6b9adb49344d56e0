"""Domain entities and value objects used by the dispatch pipeline."""

from __future__ import annotations

from .events import LogEvent
from .levels import LogLevel
from .policies import AcceptOutcome, LifecycleState, OverflowPolicy

__all__ = [
    "AcceptOutcome",
    "LifecycleState",
    "LogEvent",
    "LogLevel",
    "OverflowPolicy",
]
