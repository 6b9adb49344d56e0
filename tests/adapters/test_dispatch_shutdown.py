from __future__ import annotations

import logging
import os
import subprocess
import sys
import textwrap
import threading
import time

import pytest

from lib_log_dispatch.adapters import dispatch as dispatch_module
from lib_log_dispatch.adapters.dispatch import DROP_REPORT_TEMPLATE, SHUTDOWN_TIMEOUT_TEMPLATE, DispatchEngine
from lib_log_dispatch.adapters.sinks import MemorySink
from lib_log_dispatch.domain import LifecycleState, LogLevel, OverflowPolicy
from tests.support import FailingSink, GatedSink, build_event, messages, wait_until


def test_close_drains_every_queued_event_in_order(memory_sink: MemorySink) -> None:
    engine = DispatchEngine(memory_sink, capacity=0, register_atexit=False)
    for index in range(200):
        engine.accept(build_event(index))

    engine.close()

    assert messages(memory_sink) == [str(index) for index in range(200)]
    assert memory_sink.close_calls == 1
    assert engine.state is LifecycleState.CLOSED


def test_close_is_idempotent(memory_sink: MemorySink) -> None:
    engine = DispatchEngine(memory_sink, register_atexit=False)
    engine.close()
    engine.close()

    assert memory_sink.close_calls == 1
    assert engine.is_closed()


def test_concurrent_close_runs_the_drain_once(memory_sink: MemorySink) -> None:
    engine = DispatchEngine(memory_sink, capacity=0, workers=2, register_atexit=False)
    for index in range(100):
        engine.accept(build_event(index))
    barrier = threading.Barrier(8)

    def closer() -> None:
        barrier.wait()
        engine.close()
        assert engine.is_closed()

    closers = [threading.Thread(target=closer) for _ in range(8)]
    for thread in closers:
        thread.start()
    for thread in closers:
        thread.join(timeout=5.0)

    assert memory_sink.close_calls == 1
    assert sorted(messages(memory_sink), key=int) == [str(index) for index in range(100)]


def test_close_racing_with_producers_never_loses_the_downstream(memory_sink: MemorySink) -> None:
    engine = DispatchEngine(memory_sink, capacity=16, policy=OverflowPolicy.SYNC_FALLBACK, workers=2, register_atexit=False)
    stop = threading.Event()

    def produce() -> None:
        index = 0
        while not stop.is_set():
            engine.accept(build_event(index))
            index += 1

    producers = [threading.Thread(target=produce) for _ in range(4)]
    for thread in producers:
        thread.start()
    time.sleep(0.05)
    engine.close()
    stop.set()
    for thread in producers:
        thread.join(timeout=2.0)

    delivered = len(memory_sink.events)
    time.sleep(0.05)
    assert len(memory_sink.events) == delivered
    assert memory_sink.close_calls == 1


def test_reliable_pool_delivers_each_event_exactly_once(memory_sink: MemorySink) -> None:
    engine = DispatchEngine(memory_sink, capacity=0, workers=4, daemon=False, register_atexit=False)

    def produce(producer: int) -> None:
        for index in range(250):
            engine.accept(build_event(index, logger_name=f"producer-{producer}"))

    producers = [threading.Thread(target=produce, args=(producer,)) for producer in range(4)]
    for thread in producers:
        thread.start()
    for thread in producers:
        thread.join()
    engine.close()

    seen = [(event.logger_name, event.message) for event in memory_sink.events]
    assert len(seen) == 1_000
    assert len(set(seen)) == 1_000


def test_single_worker_preserves_per_producer_order(memory_sink: MemorySink) -> None:
    engine = DispatchEngine(memory_sink, capacity=0, workers=1, register_atexit=False)

    def produce(producer: int) -> None:
        for index in range(200):
            engine.accept(build_event(index, logger_name=f"producer-{producer}"))

    producers = [threading.Thread(target=produce, args=(producer,)) for producer in range(3)]
    for thread in producers:
        thread.start()
    for thread in producers:
        thread.join()
    engine.close()

    for producer in range(3):
        received = [int(event.message) for event in memory_sink.events if event.logger_name == f"producer-{producer}"]
        assert received == list(range(200))


def test_worker_survives_a_failing_downstream(caplog: pytest.LogCaptureFixture) -> None:
    sink = FailingSink("1")
    diagnostics: list[tuple[str, dict]] = []
    engine = DispatchEngine(
        sink,
        capacity=0,
        register_atexit=False,
        diagnostic=lambda name, payload: diagnostics.append((name, payload)),
    )

    with caplog.at_level(logging.ERROR, logger=dispatch_module.__name__):
        for index in range(3):
            engine.accept(build_event(index))
        assert wait_until(lambda: len(sink.events) == 2)

    assert messages(sink) == ["0", "2"]
    assert any("continuing" in record.getMessage() for record in caplog.records)
    assert diagnostics[0][0] == "dispatch_sink_error"
    assert diagnostics[0][1]["source"] == "worker"
    engine.close()


def test_drop_report_is_emitted_by_the_worker(memory_sink: MemorySink) -> None:
    engine = DispatchEngine(
        memory_sink,
        capacity=1,
        policy=OverflowPolicy.DROP_NEW,
        drop_report_interval=0.05,
        autostart=False,
        register_atexit=False,
    )
    for index in range(3):
        engine.offer(build_event(index))
    assert engine.dropped_count == 2

    engine.start()
    assert wait_until(lambda: any(event.message == DROP_REPORT_TEMPLATE for event in memory_sink.events))

    report = next(event for event in memory_sink.events if event.message == DROP_REPORT_TEMPLATE)
    assert report.level is LogLevel.WARN
    assert report.params == (2,)
    assert report.logger_name == engine.name
    assert engine.dropped_count == 0
    assert engine.total_dropped == 2
    engine.close()


def test_outstanding_drops_are_reported_at_close(memory_sink: MemorySink) -> None:
    engine = DispatchEngine(memory_sink, capacity=1, autostart=False, register_atexit=False)
    for index in range(3):
        engine.offer(build_event(index))

    engine.close()

    assert messages(memory_sink) == ["0", DROP_REPORT_TEMPLATE]
    assert memory_sink.events[-1].params == (2,)


def test_close_timeout_discards_the_remaining_queue(caplog: pytest.LogCaptureFixture) -> None:
    sink = GatedSink("0")
    engine = DispatchEngine(sink, capacity=0, close_timeout=0.2, register_atexit=False)
    engine.accept(build_event(0))
    assert sink.entered.wait(timeout=1.0)
    engine.accept(build_event(1))
    engine.accept(build_event(2))

    begin = time.perf_counter()
    with caplog.at_level(logging.WARNING, logger=dispatch_module.__name__):
        engine.close()
    elapsed = time.perf_counter() - begin

    assert elapsed < 2.0
    assert engine.lost_count == 2
    assert engine.state is LifecycleState.CLOSED
    assert sink.close_calls == 1
    degraded = [event for event in sink.events if event.message == SHUTDOWN_TIMEOUT_TEMPLATE]
    assert len(degraded) == 1
    assert degraded[0].level is LogLevel.ERROR
    assert degraded[0].params == (0.2, 2)
    assert any("did not drain" in record.getMessage() for record in caplog.records)

    sink.release.set()
    assert wait_until(lambda: "0" in messages(sink))
    assert "1" not in messages(sink)


def test_unstarted_engine_drains_on_the_closing_thread(memory_sink: MemorySink) -> None:
    engine = DispatchEngine(memory_sink, capacity=4, autostart=False, register_atexit=False)
    engine.accept(build_event("queued"))

    engine.close()

    assert messages(memory_sink) == ["queued"]
    assert memory_sink.closed


def test_non_daemon_workers_drain_and_exit_when_the_interpreter_finishes(
    memory_sink: MemorySink, monkeypatch: pytest.MonkeyPatch
) -> None:
    engine = DispatchEngine(memory_sink, capacity=0, daemon=False, autostart=False, register_atexit=False)
    for index in range(3):
        engine.accept(build_event(index))

    monkeypatch.setattr(dispatch_module, "_interpreter_finishing", lambda own: True)
    engine.start()

    assert wait_until(lambda: len(memory_sink.events) == 3)
    assert not memory_sink.closed
    engine.close()
    assert memory_sink.close_calls == 1


def test_daemon_workers_keep_consuming_after_the_main_thread_returns(
    memory_sink: MemorySink, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(dispatch_module, "_interpreter_finishing", lambda own: True)
    engine = DispatchEngine(memory_sink, capacity=0, daemon=True, register_atexit=False)

    engine.accept(build_event(0))
    assert wait_until(lambda: len(memory_sink.events) == 1)
    engine.accept(build_event(1))
    assert wait_until(lambda: len(memory_sink.events) == 2)

    engine.close()
    assert messages(memory_sink) == ["0", "1"]


def test_interpreter_is_not_finishing_while_the_main_thread_runs() -> None:
    assert dispatch_module._interpreter_finishing(()) is False


_BACKGROUND_PRODUCER = textwrap.dedent(
    """
    import threading
    import time
    from datetime import datetime, timezone

    from lib_log_dispatch.adapters.dispatch import DispatchEngine
    from lib_log_dispatch.adapters.sinks import MemorySink
    from lib_log_dispatch.domain import LogEvent, LogLevel

    sink = MemorySink()
    engine = DispatchEngine(sink, capacity=10, daemon={daemon})

    def produce():
        for index in range(100):
            event = LogEvent(datetime.now(timezone.utc), LogLevel.INFO, "app", "producer", str(index))
            engine.accept(event)
            time.sleep(0.01)
        time.sleep(0.3)
        print("delivered", len(sink.events), "dropped", engine.total_dropped, flush=True)

    threading.Thread(target=produce, name="producer").start()
    """
)


@pytest.mark.parametrize("daemon", [True, False])
def test_workers_serve_threads_that_outlive_the_main_thread(daemon: bool) -> None:
    env = dict(os.environ, PYTHONPATH=os.pathsep.join(path for path in sys.path if path))
    result = subprocess.run(
        [sys.executable, "-c", _BACKGROUND_PRODUCER.format(daemon=daemon)],
        capture_output=True,
        text=True,
        timeout=60,
        env=env,
        check=False,
    )

    assert result.returncode == 0, result.stderr
    _, delivered, _, dropped = result.stdout.split()
    assert int(delivered) >= 90
    assert int(dropped) <= 10


def test_atexit_hook_is_registered_and_released(memory_sink: MemorySink, monkeypatch: pytest.MonkeyPatch) -> None:
    registered: list[object] = []
    unregistered: list[object] = []
    monkeypatch.setattr(dispatch_module.atexit, "register", registered.append)
    monkeypatch.setattr(dispatch_module.atexit, "unregister", unregistered.append)

    engine = DispatchEngine(memory_sink)
    assert len(registered) == 1
    engine.close()
    engine.close()

    assert unregistered == registered


def test_atexit_callback_closes_the_engine(memory_sink: MemorySink, monkeypatch: pytest.MonkeyPatch) -> None:
    registered: list = []
    unregistered: list = []
    monkeypatch.setattr(dispatch_module.atexit, "register", registered.append)
    monkeypatch.setattr(dispatch_module.atexit, "unregister", unregistered.append)
    engine = DispatchEngine(memory_sink)
    engine.accept(build_event("pending"))

    registered[0]()

    assert engine.is_closed()
    assert messages(memory_sink) == ["pending"]
    assert unregistered == []


def test_wait_until_idle_reports_drain_progress() -> None:
    sink = GatedSink("0")
    engine = DispatchEngine(sink, capacity=0, register_atexit=False)
    engine.accept(build_event(0))
    assert sink.entered.wait(timeout=1.0)

    assert engine.wait_until_idle(timeout=0.05) is False
    sink.release.set()
    assert engine.wait_until_idle(timeout=1.0) is True
    engine.close()


def test_context_manager_closes_the_engine(memory_sink: MemorySink) -> None:
    with DispatchEngine(memory_sink, register_atexit=False) as engine:
        engine.accept(build_event("inside"))

    assert engine.is_closed()
    assert messages(memory_sink) == ["inside"]
    assert "DispatchEngine(" in repr(engine)


def test_close_waits_for_an_inflight_synchronous_write() -> None:
    sink = GatedSink("direct")
    engine = DispatchEngine(
        sink,
        capacity=1,
        policy=OverflowPolicy.SYNC_FALLBACK,
        autostart=False,
        register_atexit=False,
    )
    engine.offer(build_event("queued"))
    producer = threading.Thread(target=engine.offer, args=(build_event("direct"),))
    producer.start()
    assert sink.entered.wait(timeout=1.0)

    closed = threading.Event()

    def closer() -> None:
        engine.close()
        closed.set()

    closing = threading.Thread(target=closer)
    closing.start()

    assert not closed.wait(timeout=0.1)
    assert not sink.closed
    assert engine.state is LifecycleState.DRAINING

    sink.release.set()
    producer.join(timeout=2.0)
    closing.join(timeout=2.0)

    assert closed.is_set()
    assert messages(sink) == ["direct", "queued"]
    assert sink.close_calls == 1


def test_failing_diagnostic_hook_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    def broken_hook(name: str, payload: dict) -> None:
        raise RuntimeError("hook down")

    engine = DispatchEngine(FailingSink("0"), capacity=0, autostart=False, register_atexit=False, diagnostic=broken_hook)
    engine.accept(build_event(0))

    with caplog.at_level(logging.ERROR, logger=dispatch_module.__name__):
        engine.close()

    hook_records = [record for record in caplog.records if "diagnostic hook raised" in record.getMessage()]
    assert len(hook_records) == 1
    assert "dispatch_sink_error" in hook_records[0].getMessage()
    assert engine.is_closed()
