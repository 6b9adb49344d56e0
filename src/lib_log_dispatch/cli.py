"""Click command line for inspecting and exercising the dispatch engine.

Contents
--------
* :func:`cli` - command group with ``--use-dotenv`` and ``--version``.
* ``info`` - print the metadata banner.
* ``demo`` - push events from several producer threads through an engine
  into the Rich console and report the drop counters.
* :func:`main` - test-friendly runner returning an exit code.
"""

from __future__ import annotations

import os
import threading
import time
from typing import Sequence

import click
from rich.console import Console

from . import __init__conf__
from . import config as log_config
from .adapters.dispatch import DispatchEngine
from .adapters.sinks import NullSink, RichConsoleSink
from .application.ports.sink import SinkPort
from .domain import LogEvent, LogLevel, OverflowPolicy
from .runtime import DispatchSettings, Logger, build_engine, lossy_settings, reliable_settings


CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


class _ThrottledSink(SinkPort):
    """Delay every delivery to make overflow visible in the demo."""

    def __init__(self, sink: SinkPort, delay: float) -> None:
        self._sink = sink
        self._delay = delay

    def accept(self, event: LogEvent) -> None:
        time.sleep(self._delay)
        self._sink.accept(event)

    def close(self) -> None:
        self._sink.close()

    def is_closed(self) -> bool:
        return self._sink.is_closed()


@click.group(invoke_without_command=True, context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=None,
    help=f"Load LOG_DISPATCH_* settings from the nearest .env (default: ${log_config.DOTENV_ENV_VAR}).",
)
@click.version_option(__init__conf__.version, "--version", "-V", prog_name=__init__conf__.shell_command)
@click.pass_context
def cli(ctx: click.Context, use_dotenv: bool | None) -> None:
    """Inspect and exercise the lib_log_dispatch engine."""

    if log_config.should_use_dotenv(explicit=use_dotenv, env_value=os.environ.get(log_config.DOTENV_ENV_VAR)):
        log_config.enable_dotenv()
    if ctx.invoked_subcommand is None:
        click.echo(__init__conf__.print_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    click.echo(__init__conf__.print_info(), nl=False)


@cli.command("demo", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--mode", type=click.Choice(["reliable", "lossy", "env"]), default="lossy", show_default=True)
@click.option("--count", type=click.IntRange(min=0), default=20, show_default=True, help="Events per producer.")
@click.option("--producers", type=click.IntRange(min=1), default=2, show_default=True)
@click.option("--capacity", type=click.IntRange(min=0), default=None, help="Queue bound (0 = unbounded).")
@click.option(
    "--policy",
    type=click.Choice([policy.value for policy in OverflowPolicy]),
    default=None,
    help="Overflow policy for a full bounded queue.",
)
@click.option("--workers", type=click.IntRange(min=1), default=None)
@click.option("--delay", type=click.FloatRange(min=0.0), default=0.0, show_default=True, help="Seconds each delivery takes.")
@click.option("--quiet", is_flag=True, help="Discard events instead of printing them.")
def cli_demo(
    mode: str,
    count: int,
    producers: int,
    capacity: int | None,
    policy: str | None,
    workers: int | None,
    delay: float,
    quiet: bool,
) -> None:
    """Emit events from several threads and print the engine counters."""

    settings = _demo_settings(mode, capacity=capacity, policy=policy, workers=workers)
    downstream: SinkPort = NullSink() if quiet else RichConsoleSink()
    if delay:
        downstream = _ThrottledSink(downstream, delay)
    engine = build_engine(downstream, settings, name="demo", register_atexit=False)
    _run_producers(engine, settings, count=count, producers=producers)
    engine.close()

    summary = Console(highlight=False)
    summary.print(
        f"mode={mode} capacity={settings.capacity} policy={settings.policy.value} workers={settings.workers} "
        f"submitted={count * producers} dropped={engine.total_dropped} lost={engine.lost_count}",
        soft_wrap=True,
    )


def _demo_settings(mode: str, *, capacity: int | None, policy: str | None, workers: int | None) -> DispatchSettings:
    if mode == "reliable":
        settings = reliable_settings()
    elif mode == "lossy":
        settings = lossy_settings()
    else:
        settings = DispatchSettings.from_env()
    changes: dict[str, object] = {}
    if capacity is not None:
        changes["capacity"] = capacity
    if policy is not None:
        changes["policy"] = OverflowPolicy(policy)
    if workers is not None:
        changes["workers"] = workers
    return settings.with_overrides(**changes) if changes else settings


def _run_producers(engine: DispatchEngine, settings: DispatchSettings, *, count: int, producers: int) -> None:
    levels = list(LogLevel)

    def produce(index: int) -> None:
        log = Logger(f"demo.producer-{index}", engine, min_level=settings.min_level)
        for sequence in range(count):
            log.log(levels[sequence % len(levels)], "producer {} event {}", index, sequence)

    threads = [threading.Thread(target=produce, args=(index,), name=f"producer-{index}") for index in range(producers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Click group in a test-friendly manner.

    Examples
    --------
    >>> main(["--version"])  # doctest: +ELLIPSIS
    lib_log_dispatch, version 0.1.0
    0
    """

    args = list(argv) if argv is not None else None
    try:
        cli.main(args=args, prog_name=__init__conf__.shell_command, standalone_mode=False)
    except click.ClickException as error:
        error.show()
        return error.exit_code
    except click.exceptions.Exit as exit_request:
        return exit_request.exit_code
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    return 0


__all__ = ["cli", "main"]
