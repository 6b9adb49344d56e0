"""Static package metadata surfaced by the CLI."""

from __future__ import annotations

name = "lib_log_dispatch"
title = "Leveled structured logging with a bounded asynchronous dispatch engine"
version = "0.1.0"
homepage = ""
author = "bitranox"
shell_command = "lib_log_dispatch"


def print_info() -> str:
    """Return the metadata banner printed by ``lib_log_dispatch info``.

    Examples
    --------
    >>> print_info().splitlines()[0]
    'Info for lib_log_dispatch:'
    """

    fields = {
        "name": name,
        "title": title,
        "version": version,
        "homepage": homepage,
        "author": author,
        "shell_command": shell_command,
    }
    width = max(len(key) for key in fields)
    lines = [f"Info for {name}:", ""]
    lines.extend(f"    {key.ljust(width)} = {value}" for key, value in fields.items())
    return "\n".join(lines) + "\n"
