"""Thread-based dispatch engine decoupling producers from sink latency.

Purpose
-------
Wrap a downstream :class:`SinkPort` with a queue and one or more consumer
threads so producer threads only pay for a single overflow-policy decision.

Contents
--------
* :class:`DispatchEngine` - asynchronous :class:`SinkPort` with bounded or
  unbounded buffering, overflow policies, drop accounting, and an idempotent
  close/drain protocol.

System Role
-----------
The only component with real concurrency hazards. It is itself a
``SinkPort``, so it can sit anywhere in a chain of filter/composite sinks.

Alignment Notes
---------------
Close runs ``OPEN -> CLOSING -> DRAINING -> CLOSED``. When ``close_timeout``
elapses before the workers finish, events still sitting in the queue are
discarded and counted in :attr:`DispatchEngine.lost_count`; this is the one
data-loss path of an orderly close and it is reported through an ERROR event
and the diagnostic hook before the downstream sink is closed.
"""

from __future__ import annotations

import atexit
import logging
import queue
import threading
import time
from collections.abc import Callable, Collection
from typing import Any

from lib_log_dispatch.application.ports.sink import SinkPort
from lib_log_dispatch.application.ports.time import ClockPort
from lib_log_dispatch.domain.events import LogEvent
from lib_log_dispatch.domain.levels import LogLevel
from lib_log_dispatch.domain.policies import AcceptOutcome, LifecycleState, OverflowPolicy

from .clock import SystemClock


LOGGER = logging.getLogger(__name__)

DROP_REPORT_TEMPLATE = "Dispatcher dropped {} events due to backpressure"
SHUTDOWN_TIMEOUT_TEMPLATE = "Dispatcher shutdown timed out after {}s; {} queued events were lost"


def _interpreter_finishing(own: Collection[threading.Thread]) -> bool:
    """Return ``True`` once only the threads in ``own`` keep the interpreter alive.

    The main thread has returned and no other non-daemon thread is running,
    so the interpreter waits for ``own`` before it runs the atexit hooks.
    """

    main = threading.main_thread()
    if main.is_alive():
        return False
    return not any(
        thread.is_alive() and not thread.daemon and thread is not main and thread not in own
        for thread in threading.enumerate()
    )


class DispatchEngine(SinkPort):
    """Deliver events to ``sink`` on background worker threads.

    Examples
    --------
    >>> from lib_log_dispatch.adapters.sinks import MemorySink
    >>> from datetime import datetime, timezone
    >>> downstream = MemorySink()
    >>> engine = DispatchEngine(downstream, capacity=16, register_atexit=False)
    >>> event = LogEvent(datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc), LogLevel.INFO, 'svc', 'main', 'msg')
    >>> engine.offer(event)
    <AcceptOutcome.ACCEPTED: 'accepted'>
    >>> engine.close()
    >>> [item.message for item in downstream.events], downstream.closed
    (['msg'], True)
    """

    def __init__(
        self,
        sink: SinkPort,
        *,
        capacity: int = 1024,
        policy: OverflowPolicy | str = OverflowPolicy.DROP_NEW,
        workers: int = 1,
        daemon: bool = True,
        close_timeout: float | None = 5.0,
        drop_report_interval: float = 10.0,
        poll_interval: float = 0.1,
        name: str | None = None,
        clock: ClockPort | None = None,
        diagnostic: Callable[[str, dict[str, Any]], None] | None = None,
        autostart: bool = True,
        register_atexit: bool = True,
    ) -> None:
        """Validate the configuration and start the workers.

        Parameters
        ----------
        sink:
            Downstream sink receiving every delivered event.
        capacity:
            ``0`` for an unbounded queue; ``N > 0`` bounds the queue and
            applies ``policy`` once ``N`` events are pending.
        policy:
            :class:`OverflowPolicy` (or its name) used when the bounded queue
            is full. Ignored for unbounded queues.
        workers:
            Number of consumer threads. ``1`` preserves FIFO order; more
            workers raise throughput but give no cross-worker ordering.
        daemon:
            Whether the workers may be abandoned at process exit.
        close_timeout:
            Seconds :meth:`close` waits for the workers before discarding
            what is left; ``None`` waits indefinitely.
        drop_report_interval:
            Minimum seconds between two synthesized drop-report events.
        poll_interval:
            Bounded wait of a worker for the next event; also the latency with
            which workers observe :meth:`close`.
        name:
            Prefix for worker thread names and logger name of synthesized
            events. Defaults to ``dispatch-<id>``.
        clock:
            Timestamp provider for synthesized events.
        diagnostic:
            Optional hook invoked with ``(name, payload)`` for worker errors,
            drop reports, and degraded shutdowns.
        autostart:
            Start the workers immediately. With ``False`` events queue up
            until :meth:`start` (or :meth:`close`, which drains inline).
        register_atexit:
            Register a best-effort close at interpreter exit; explicit
            :meth:`close` deregisters it.
        """
        if sink is None or not callable(getattr(sink, "accept", None)):
            raise TypeError("sink must provide accept(event), close() and is_closed()")
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0 (0 means unbounded), got {capacity}")
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        if close_timeout is not None and close_timeout <= 0:
            raise ValueError(f"close_timeout must be positive or None, got {close_timeout}")
        if drop_report_interval <= 0:
            raise ValueError(f"drop_report_interval must be positive, got {drop_report_interval}")
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")

        self._sink = sink
        self._capacity = capacity
        self._policy = policy if isinstance(policy, OverflowPolicy) else OverflowPolicy.from_name(policy)
        self._worker_count = workers
        self._daemon = daemon
        self._close_timeout = close_timeout
        self._drop_report_interval = drop_report_interval
        self._poll_interval = poll_interval
        self._name = name or f"dispatch-{id(self):x}"
        self._clock = clock or SystemClock()
        self._diagnostic = diagnostic

        self._queue: queue.Queue[LogEvent] = queue.Queue(maxsize=capacity)
        self._lock = threading.Lock()
        self._sync_idle = threading.Condition(self._lock)
        self._sync_in_flight = 0
        self._close_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._abort_event = threading.Event()
        self._threads: list[threading.Thread] = []
        self._started = False
        self._closed = False
        self._state = LifecycleState.OPEN
        self._dropped = 0
        self._total_dropped = 0
        self._lost = 0
        self._last_report = time.monotonic()

        self._atexit_registered = False
        if register_atexit:
            atexit.register(self._close_at_exit)
            self._atexit_registered = True

        if autostart:
            self.start()

    # ------------------------------------------------------------------ intake

    def start(self) -> None:
        """Start the worker threads once; later calls have no effect."""
        with self._lock:
            if self._started or self._closed:
                return
            self._started = True
            for index in range(self._worker_count):
                thread = threading.Thread(
                    target=self._run,
                    name=f"{self._name}-worker-{index}",
                    daemon=self._daemon,
                )
                self._threads.append(thread)
                thread.start()

    def accept(self, event: LogEvent) -> None:
        """Hand ``event`` to the engine; see :meth:`offer` for the decision."""
        self.offer(event)

    def offer(self, event: LogEvent) -> AcceptOutcome:
        """Enqueue ``event`` or resolve the overflow policy.

        Returns the :class:`AcceptOutcome`. ``DISCARDED`` means the engine is
        closed; such events are not counted as drops.
        """
        if event is None:
            raise TypeError("event must not be None")
        with self._lock:
            if self._closed:
                return AcceptOutcome.DISCARDED
            try:
                self._queue.put_nowait(event)
            except queue.Full:
                pass
            else:
                return AcceptOutcome.ACCEPTED

            if self._policy is OverflowPolicy.DROP_NEW:
                self._record_drops(1)
                return AcceptOutcome.REJECTED

            if self._policy is OverflowPolicy.DROP_OLD:
                evicted = self._evict_until_enqueued(event)
                self._record_drops(evicted)
                return AcceptOutcome.EVICT_AND_ACCEPT if evicted else AcceptOutcome.ACCEPTED

            self._sync_in_flight += 1

        # SYNC_FALLBACK: the producer absorbs the downstream latency.
        try:
            self._deliver(event, source="sync_fallback")
        finally:
            with self._sync_idle:
                self._sync_in_flight -= 1
                self._sync_idle.notify_all()
        return AcceptOutcome.SYNCHRONOUS

    def _evict_until_enqueued(self, event: LogEvent) -> int:
        """Evict queue heads until ``event`` fits; return the eviction count.

        Runs under ``self._lock`` so no producer refills the freed slot.
        """
        evicted = 0
        while True:
            try:
                self._queue.put_nowait(event)
                return evicted
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    continue
                self._queue.task_done()
                evicted += 1

    def _record_drops(self, count: int) -> None:
        # Caller holds self._lock.
        if count:
            self._dropped += count
            self._total_dropped += count

    # ----------------------------------------------------------------- workers

    def _run(self) -> None:
        """Worker loop: bounded polls until close, then a non-blocking drain."""
        try:
            while not self._stop_event.is_set() and not self._exit_requested():
                self._maybe_report_drops()
                try:
                    event = self._queue.get(timeout=self._poll_interval)
                except queue.Empty:
                    continue
                try:
                    self._deliver(event, source="worker")
                finally:
                    self._queue.task_done()
        finally:
            self._drain_nowait()

    def _exit_requested(self) -> bool:
        # Daemon workers never hold up interpreter exit.
        return not self._daemon and _interpreter_finishing(self._threads)

    def _drain_nowait(self) -> None:
        """Deliver queued events without waiting until the queue is empty."""
        while not self._abort_event.is_set():
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return
            try:
                self._deliver(event, source="drain")
            finally:
                self._queue.task_done()

    def _deliver(self, event: LogEvent, *, source: str) -> None:
        """Forward ``event`` downstream; failures are reported, never raised."""
        try:
            self._sink.accept(event)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Dispatch downstream sink raised an exception; continuing", exc_info=exc)
            self._emit_diagnostic(
                "dispatch_sink_error",
                {"source": source, "logger": event.logger_name, "exception": repr(exc)},
            )

    def _maybe_report_drops(self, *, force: bool = False) -> None:
        """Emit a WARN event with the drop count when the interval elapsed."""
        now = time.monotonic()
        with self._lock:
            if not force and now - self._last_report < self._drop_report_interval:
                return
            dropped = self._dropped
            if dropped == 0:
                return
            self._dropped = 0
            self._last_report = now
        self._emit_diagnostic("dispatch_drop_report", {"dropped": dropped})
        # Delivered directly so the report itself can never be dropped.
        self._deliver(self._synthesize(LogLevel.WARN, DROP_REPORT_TEMPLATE, dropped), source="drop_report")

    def _synthesize(self, level: LogLevel, template: str, *params: Any) -> LogEvent:
        return LogEvent(
            timestamp=self._clock.now(),
            level=level,
            logger_name=self._name,
            thread_name=threading.current_thread().name,
            message=template,
            params=params,
        )

    # ---------------------------------------------------------------- shutdown

    def close(self) -> None:
        """Stop intake, drain the queue, then close the downstream sink once.

        Safe to call from any thread and any number of times; concurrent
        callers wait for the first one to finish.
        """
        with self._close_lock:
            with self._lock:
                if self._closed:
                    return
                self._closed = True
                self._state = LifecycleState.CLOSING
            self._unregister_atexit()

            self._stop_event.set()
            with self._lock:
                self._state = LifecycleState.DRAINING

            deadline = None if self._close_timeout is None else time.monotonic() + self._close_timeout
            completed = self._join_workers(deadline) and self._wait_sync_writers(deadline)
            if completed:
                self._drain_nowait()
                lost = 0
            else:
                self._abort_event.set()
                lost = self._discard_pending()

            self._maybe_report_drops(force=True)
            if not completed:
                self._report_degraded_shutdown(lost)

            try:
                self._sink.close()
            except Exception as exc:  # noqa: BLE001
                LOGGER.error("Dispatch downstream sink raised while closing", exc_info=exc)
                self._emit_diagnostic("dispatch_sink_close_error", {"exception": repr(exc)})

            with self._lock:
                self._state = LifecycleState.CLOSED

    def _join_workers(self, deadline: float | None) -> bool:
        """Join all workers against ``deadline``; ``True`` when all exited."""
        current = threading.current_thread()
        others = [thread for thread in self._threads if thread is not current]
        for thread in others:
            if deadline is None:
                thread.join()
            else:
                thread.join(max(0.0, deadline - time.monotonic()))
        return not any(thread.is_alive() for thread in others)

    def _wait_sync_writers(self, deadline: float | None) -> bool:
        """Wait for SYNC_FALLBACK writes that passed the closed check."""
        with self._sync_idle:
            while self._sync_in_flight:
                if deadline is None:
                    self._sync_idle.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._sync_idle.wait(remaining)
        return True

    def _discard_pending(self) -> int:
        """Drop whatever is still queued after a forced stop."""
        discarded = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
            self._queue.task_done()
            discarded += 1
        with self._lock:
            self._lost += discarded
        return discarded

    def _report_degraded_shutdown(self, lost: int) -> None:
        LOGGER.warning(
            "Dispatch engine %s did not drain within %ss; %d queued events were lost",
            self._name,
            self._close_timeout,
            lost,
        )
        self._emit_diagnostic("dispatch_shutdown_timeout", {"timeout": self._close_timeout, "lost": lost})
        self._deliver(
            self._synthesize(LogLevel.ERROR, SHUTDOWN_TIMEOUT_TEMPLATE, self._close_timeout, lost),
            source="shutdown",
        )

    def _close_at_exit(self) -> None:
        self._atexit_registered = False
        self.close()

    def _unregister_atexit(self) -> None:
        if self._atexit_registered:
            atexit.unregister(self._close_at_exit)
            self._atexit_registered = False

    def _emit_diagnostic(self, name: str, payload: dict[str, Any]) -> None:
        """Invoke the diagnostic hook while guarding against callback failures."""

        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as diagnostic_exc:  # noqa: BLE001
            LOGGER.error("Dispatch diagnostic hook raised while reporting %s", name, exc_info=diagnostic_exc)

    # ------------------------------------------------------------- inspection

    def is_closed(self) -> bool:
        return self._closed

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until every queued event was delivered or ``timeout`` elapses.

        Returns ``True`` when the queue drained fully.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        condition = self._queue.all_tasks_done
        with condition:
            while self._queue.unfinished_tasks:
                if deadline is None:
                    condition.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                condition.wait(remaining)
        return True

    def pending(self) -> list[LogEvent]:
        """Return a snapshot of the queued events, oldest first."""
        with self._queue.mutex:
            return list(self._queue.queue)

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def name(self) -> str:
        return self._name

    @property
    def capacity(self) -> int:
        """Queue bound; ``0`` means unbounded."""
        return self._capacity

    @property
    def policy(self) -> OverflowPolicy:
        return self._policy

    @property
    def workers(self) -> int:
        return self._worker_count

    @property
    def daemon(self) -> bool:
        return self._daemon

    @property
    def dropped_count(self) -> int:
        """Drops since the last drop report."""
        with self._lock:
            return self._dropped

    @property
    def total_dropped(self) -> int:
        """Drops since construction; never reset."""
        with self._lock:
            return self._total_dropped

    @property
    def lost_count(self) -> int:
        """Events discarded because :meth:`close` timed out."""
        with self._lock:
            return self._lost

    def __enter__(self) -> "DispatchEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"DispatchEngine(name={self._name!r}, sink={self._sink!r}, capacity={self._capacity}, "
            f"policy={self._policy.name}, workers={self._worker_count}, state={self._state.name}, "
            f"dropped={self._dropped})"
        )


__all__ = ["DROP_REPORT_TEMPLATE", "DispatchEngine", "SHUTDOWN_TIMEOUT_TEMPLATE"]
