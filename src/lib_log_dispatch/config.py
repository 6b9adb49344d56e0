"""Optional ``.env`` loading for ``LOG_DISPATCH_*`` settings.

Why
---
Deployments often keep engine settings in a ``.env`` next to the
application. Loading is opt-in (CLI flag or ``LOG_DISPATCH_USE_DOTENV``) and
never overrides variables that are already set in the real environment.

Contents
--------
* :data:`DOTENV_ENV_VAR` - environment toggle name.
* :func:`should_use_dotenv` - precedence between CLI flag and toggle.
* :func:`enable_dotenv` - locate and load the nearest ``.env`` once.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from dotenv import find_dotenv, load_dotenv


LOGGER = logging.getLogger(__name__)

DOTENV_ENV_VAR = "LOG_DISPATCH_USE_DOTENV"

_TRUTHY = {"1", "true", "yes", "on"}

_LOCK = threading.Lock()
_LOADED_PATH: Path | None = None
_ATTEMPTED = False


def should_use_dotenv(*, explicit: bool | None, env_value: str | None) -> bool:
    """Return whether ``.env`` loading is requested.

    An explicit CLI choice wins; otherwise the environment toggle decides.

    Examples
    --------
    >>> should_use_dotenv(explicit=None, env_value="1")
    True
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    """

    if explicit is not None:
        return explicit
    return env_value is not None and env_value.strip().lower() in _TRUTHY


def enable_dotenv(*, search_from: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` (searching upwards) without overriding.

    Returns the resolved path of the loaded file, or ``None`` when no file
    was found. Subsequent calls return the first result.
    """

    global _LOADED_PATH, _ATTEMPTED
    with _LOCK:
        if _ATTEMPTED:
            return _LOADED_PATH
        _ATTEMPTED = True
        if search_from is not None:
            candidate = _search_upwards(search_from)
        else:
            found = find_dotenv(usecwd=True)
            candidate = Path(found) if found else None
        if candidate is None:
            LOGGER.debug("No .env file found for lib_log_dispatch settings")
            return None
        load_dotenv(candidate, override=False)
        _LOADED_PATH = candidate.resolve()
        LOGGER.debug("Loaded lib_log_dispatch settings from %s", _LOADED_PATH)
        return _LOADED_PATH


def _search_upwards(start: Path) -> Path | None:
    directory = start.resolve()
    for folder in (directory, *directory.parents):
        candidate = folder / ".env"
        if candidate.is_file():
            return candidate
    return None


def _reset_dotenv_state_for_testing() -> None:
    global _LOADED_PATH, _ATTEMPTED
    with _LOCK:
        _LOADED_PATH = None
        _ATTEMPTED = False


__all__ = ["DOTENV_ENV_VAR", "enable_dotenv", "should_use_dotenv"]
