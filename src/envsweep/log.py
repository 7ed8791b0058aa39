"""Leveled terminal logging for envsweep.

Normal progress goes to stdout; warnings and errors go to stderr so that
dry-run plans and deletion summaries stay pipeable. Debug and trace lines
carry a ``[component]`` tag naming the subsystem that emitted them.
"""

from __future__ import annotations

import os
import sys
from enum import IntEnum

from rich.console import Console
from rich.text import Text


class LogLevel(IntEnum):
    TRACE = 10
    DEBUG = 20
    INFO = 30
    SUCCESS = 35
    WARNING = 40
    ERROR = 50


LEVEL_NAMES = tuple(level.name.lower() for level in LogLevel)
_ALIASES = {"warn": LogLevel.WARNING}
_STYLES = {
    LogLevel.TRACE: "dim",
    LogLevel.DEBUG: "cyan",
    LogLevel.SUCCESS: "green",
    LogLevel.WARNING: "yellow",
    LogLevel.ERROR: "bold red",
}
_DEFAULT_LEVEL = LogLevel.INFO
_configured_level: LogLevel | None = None
_no_color_override: bool | None = None


def parse_level(value: str | None) -> LogLevel:
    """Map a level name to a ``LogLevel``; unknown or blank names mean INFO.

    Example:
        >>> parse_level("Debug")
        <LogLevel.DEBUG: 20>
        >>> parse_level("loud")
        <LogLevel.INFO: 30>
    """
    normalized = (value or "").strip().lower()
    if normalized in _ALIASES:
        return _ALIASES[normalized]
    try:
        return LogLevel[normalized.upper()]
    except KeyError:
        return _DEFAULT_LEVEL


def configured_level() -> LogLevel:
    global _configured_level
    if _configured_level is None:
        _configured_level = parse_level(os.environ.get("ENVSWEEP_LOG_LEVEL"))
    return _configured_level


def set_level(value: str | None) -> None:
    """Set the active log level, overriding ``ENVSWEEP_LOG_LEVEL``."""
    global _configured_level
    _configured_level = parse_level(value)


def set_no_color(value: bool | None) -> None:
    """Force colour off (``True``) or defer to the environment (``None``)."""
    global _no_color_override
    _no_color_override = value


def is_enabled(level: LogLevel) -> bool:
    return level >= configured_level()


def _no_color() -> bool:
    if _no_color_override is not None:
        return _no_color_override
    return bool(os.environ.get("NO_COLOR") or os.environ.get("ENVSWEEP_NO_COLOR"))


def _console(*, stderr: bool) -> Console:
    return Console(
        file=sys.stderr if stderr else sys.stdout,
        soft_wrap=True,
        highlight=False,
        no_color=_no_color(),
    )


def emit(
    level: LogLevel,
    message: str,
    *,
    component: str | None = None,
    style: str | None = None,
) -> None:
    if not is_enabled(level):
        return
    if component:
        message = f"[{component}] {message}"
    text = Text(message, style=style or _STYLES.get(level, ""))
    _console(stderr=level >= LogLevel.WARNING).print(text)


def trace(message: str, *, component: str | None = None) -> None:
    emit(LogLevel.TRACE, message, component=component)


def debug(message: str, *, component: str | None = None) -> None:
    emit(LogLevel.DEBUG, message, component=component)


def info(message: str, *, style: str | None = None) -> None:
    emit(LogLevel.INFO, message, style=style)


def success(message: str, *, style: str | None = None) -> None:
    emit(LogLevel.SUCCESS, message, style=style)


def warning(message: str) -> None:
    emit(LogLevel.WARNING, message)


def error(message: str) -> None:
    emit(LogLevel.ERROR, message)
