from __future__ import annotations

from io import StringIO

import pytest
from rich.console import Console

from lib_log_dispatch.adapters.sinks import MemorySink


@pytest.fixture
def record_console() -> Console:
    return Console(file=StringIO(), record=True, width=200, color_system=None)


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()
