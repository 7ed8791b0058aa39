"""Console output and the deletion confirmation prompt."""

from __future__ import annotations

import sys

import questionary


def _use_questionary() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def say(message: str) -> None:
    """Print a plain message to stdout.

    Example:
        >>> say("envsweep 0.1.0")
        envsweep 0.1.0
    """
    print(message)


def die(message: str, code: int = 1) -> None:
    """Report ``message`` as an error on stderr and exit with ``code``."""
    print(f"error: {message}", file=sys.stderr)
    sys.exit(code)


def confirm(text: str, default: bool = False) -> bool:
    """Ask a yes/no question.

    Uses a questionary prompt on a terminal and a plain ``[y/N]`` line
    otherwise. An interrupted prompt or closed stdin counts as "no", so an
    unattended run never deletes without ``--yes``.
    """
    if _use_questionary():
        return questionary.confirm(text, default=default).ask() is True
    suffix = "[Y/n]" if default else "[y/N]"
    try:
        response = input(f"{text} {suffix}: ").strip().lower()
    except EOFError:
        return False
    if not response:
        return default
    return response in {"y", "yes"}
