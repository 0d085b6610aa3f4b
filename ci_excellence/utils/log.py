"""Console logging for CI steps.

Lines look like ``[version][INFO] Current Version: 1.2.3`` and go to stderr so
stdout stays free for command results. ``CI_LOG_LEVEL`` filters output.
"""

from __future__ import annotations

import os
import sys

_LEVELS = {"DEBUG": 0, "INFO": 1, "WARN": 2, "FAIL": 3}
_LEVEL_ALIASES = {
    "debug": "DEBUG",
    "trace": "DEBUG",
    "info": "INFO",
    "warn": "WARN",
    "warning": "WARN",
    "error": "FAIL",
}


def _threshold() -> int:
    name = _LEVEL_ALIASES.get(str(os.environ.get("CI_LOG_LEVEL", "") or "").strip().lower(), "INFO")
    return _LEVELS[name]


def emit(component: str, level: str, msg: str) -> None:
    if _LEVELS[level] < _threshold():
        return
    print(f"[{component}][{level}] {msg}", file=sys.stderr)


def debug(component: str, msg: str) -> None:
    emit(component, "DEBUG", msg)


def info(component: str, msg: str) -> None:
    emit(component, "INFO", msg)


def warn(component: str, msg: str) -> None:
    emit(component, "WARN", msg)


def error(component: str, msg: str) -> None:
    emit(component, "FAIL", msg)
