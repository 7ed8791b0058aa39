"""Blocking execution of the external CLIs envsweep drives.

Every call captures text output and carries its own timeout. A missing
executable is reported as ``None`` rather than raised, so each adapter can
map it to the failure that fits its operation.
"""

import json
import subprocess
from dataclasses import dataclass
from typing import Protocol

from . import log as envsweep_log

TIMEOUT_RETURNCODE = 124


@dataclass(frozen=True)
class CommandRequest:
    """One external command invocation."""

    argv: tuple[str, ...]
    timeout_seconds: float | None = None


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of a command; ``timed_out`` implies returncode 124."""

    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        """``True`` when the command exited with status 0."""
        return self.returncode == 0


class CommandRunner(Protocol):
    """Seam for executing commands; tests substitute canned runners."""

    def run(self, request: CommandRequest) -> CommandResult | None: ...


def _as_text(value: object) -> str:
    return value if isinstance(value, str) else ""


class SubprocessCommandRunner:
    """Run commands with ``subprocess.run`` and capture their output."""

    def run(self, request: CommandRequest) -> CommandResult | None:
        try:
            completed = subprocess.run(
                list(request.argv),
                capture_output=True,
                text=True,
                check=False,
                timeout=request.timeout_seconds,
            )
        except FileNotFoundError:
            return None
        except subprocess.TimeoutExpired as exc:
            return CommandResult(
                argv=request.argv,
                returncode=TIMEOUT_RETURNCODE,
                stdout=_as_text(exc.stdout),
                stderr=_as_text(exc.stderr),
                timed_out=True,
            )
        return CommandResult(
            argv=request.argv,
            returncode=completed.returncode,
            stdout=_as_text(completed.stdout),
            stderr=_as_text(completed.stderr),
        )


_DEFAULT_COMMAND_RUNNER: CommandRunner = SubprocessCommandRunner()


def run_with_runner(
    request: CommandRequest,
    *,
    runner: CommandRunner | None = None,
    component: str | None = None,
) -> CommandResult | None:
    """Execute ``request``, logging the command line under ``component``."""
    envsweep_log.debug(f"run {' '.join(request.argv)}", component=component)
    result = (runner or _DEFAULT_COMMAND_RUNNER).run(request)
    if result is None:
        envsweep_log.trace("command not found", component=component)
    else:
        envsweep_log.trace(f"exit {result.returncode}", component=component)
    return result


def missing_command_detail(request: CommandRequest) -> str:
    argv = request.argv
    if not argv:
        return "missing required command"
    return f"missing required command: {argv[0]}"


def command_failure_detail(request: CommandRequest, result: CommandResult) -> str:
    """Describe a failed command with its captured output.

    Example:
        >>> request = CommandRequest(argv=("terminus", "env:list"))
        >>> result = CommandResult(argv=request.argv, returncode=1, stdout="", stderr="boom")
        >>> command_failure_detail(request, result)
        'command failed: terminus env:list\\nboom'
    """
    output = (result.stderr or result.stdout or "").strip()
    command_text = " ".join(request.argv)
    if result.timed_out:
        return f"command timed out: {command_text}"
    if output:
        return f"command failed: {command_text}\n{output}"
    return f"command failed: {command_text}"


def parse_json_output(result: CommandResult) -> object:
    """Parse command stdout as JSON; empty output parses as ``None``.

    Example:
        >>> parse_json_output(CommandResult(argv=(), returncode=0, stdout='{"a": 1}', stderr=""))
        {'a': 1}
    """
    raw = (result.stdout or "").strip()
    if not raw:
        return None
    return json.loads(raw)
