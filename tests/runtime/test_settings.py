from __future__ import annotations

import pytest

from lib_log_dispatch.domain import LogLevel, OverflowPolicy
from lib_log_dispatch.runtime import ENV_PREFIX, DispatchSettings


def test_defaults_describe_a_bounded_single_worker_engine() -> None:
    settings = DispatchSettings()

    assert settings.capacity == 1024
    assert settings.bounded
    assert settings.policy is OverflowPolicy.DROP_NEW
    assert settings.workers == 1
    assert settings.daemon is True
    assert settings.close_timeout == 5.0
    assert settings.drop_report_interval == 10.0
    assert settings.min_level is LogLevel.TRACE


def test_string_values_are_coerced() -> None:
    settings = DispatchSettings(policy="sync-fallback", min_level="error")  # type: ignore[arg-type]
    assert settings.policy is OverflowPolicy.SYNC_FALLBACK
    assert settings.min_level is LogLevel.ERROR


@pytest.mark.parametrize(
    "changes, fragment",
    [
        ({"capacity": -5}, "capacity"),
        ({"workers": 0}, "workers"),
        ({"close_timeout": 0}, "close_timeout"),
        ({"drop_report_interval": -1}, "drop_report_interval"),
        ({"poll_interval": 0}, "poll_interval"),
        ({"policy": "sometimes"}, "overflow policy"),
        ({"min_level": "loud"}, "Unknown log level"),
    ],
)
def test_invalid_values_are_rejected(changes: dict, fragment: str) -> None:
    with pytest.raises(ValueError, match=fragment):
        DispatchSettings(**changes)


def test_environment_wins_over_overrides() -> None:
    environ = {
        f"{ENV_PREFIX}CAPACITY": "64",
        f"{ENV_PREFIX}POLICY": "drop-old",
        f"{ENV_PREFIX}WORKERS": "3",
        f"{ENV_PREFIX}DAEMON": "false",
        f"{ENV_PREFIX}CLOSE_TIMEOUT": "never",
        f"{ENV_PREFIX}DROP_REPORT_INTERVAL": "2.5",
        f"{ENV_PREFIX}MIN_LEVEL": "warning",
    }

    settings = DispatchSettings.from_env(environ, capacity=8, workers=1)

    assert settings.capacity == 64
    assert settings.policy is OverflowPolicy.DROP_OLD
    assert settings.workers == 3
    assert settings.daemon is False
    assert settings.close_timeout is None
    assert settings.drop_report_interval == 2.5
    assert settings.min_level is LogLevel.WARN


def test_blank_environment_values_are_ignored() -> None:
    settings = DispatchSettings.from_env({f"{ENV_PREFIX}CAPACITY": "  "}, capacity=8)
    assert settings.capacity == 8


def test_from_env_reads_the_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(f"{ENV_PREFIX}WORKERS", "2")
    assert DispatchSettings.from_env().workers == 2


@pytest.mark.parametrize(
    "variable, raw, fragment",
    [
        ("CAPACITY", "lots", "must be an integer"),
        ("CLOSE_TIMEOUT", "soon", "must be a number of seconds"),
        ("DAEMON", "maybe", "must be a boolean flag"),
        ("POLICY", "whatever", "LOG_DISPATCH_POLICY"),
    ],
)
def test_malformed_environment_values_name_the_variable(variable: str, raw: str, fragment: str) -> None:
    with pytest.raises(ValueError, match=fragment):
        DispatchSettings.from_env({ENV_PREFIX + variable: raw})


def test_unknown_overrides_are_a_type_error() -> None:
    with pytest.raises(TypeError, match="Unknown dispatch settings: colour"):
        DispatchSettings.from_env({}, colour="blue")


def test_with_overrides_revalidates() -> None:
    settings = DispatchSettings().with_overrides(capacity=0)
    assert not settings.bounded
    with pytest.raises(ValueError):
        settings.with_overrides(workers=0)
