"""Shared helpers for tests exercising threads and sinks."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from lib_log_dispatch.adapters.sinks import MemorySink
from lib_log_dispatch.domain import LogEvent, LogLevel

BASE_TIME = datetime(2025, 9, 23, 12, 0, tzinfo=timezone.utc)


def build_event(label: str | int, level: LogLevel = LogLevel.INFO, *, logger_name: str = "tests") -> LogEvent:
    index = label if isinstance(label, int) else 0
    return LogEvent(
        timestamp=BASE_TIME + timedelta(seconds=index),
        level=level,
        logger_name=logger_name,
        thread_name="MainThread",
        message=str(label),
    )


def messages(sink: MemorySink) -> list[str]:
    return [event.message for event in sink.events]


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class GatedSink(MemorySink):
    """Memory sink that blocks delivery of selected messages until released."""

    def __init__(self, *blocked: str) -> None:
        super().__init__()
        self._blocked = set(blocked)
        self.entered = threading.Event()
        self.release = threading.Event()

    def accept(self, event: LogEvent) -> None:
        if event.message in self._blocked:
            self.entered.set()
            if not self.release.wait(timeout=5.0):  # pragma: no cover
                raise AssertionError("gate was never released")
        super().accept(event)


class FailingSink(MemorySink):
    """Memory sink raising for selected messages."""

    def __init__(self, *failing: str) -> None:
        super().__init__()
        self._failing = set(failing)

    def accept(self, event: LogEvent) -> None:
        if event.message in self._failing:
            raise OSError(f"cannot write {event.message}")
        super().accept(event)
