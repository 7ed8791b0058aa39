"""Command-line entry point for envsweep."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from . import __version__, config
from . import log as envsweep_log
from .deletion import DeletionReport
from .io import die, say
from .models import DeleteCIOptions, DeletePROptions
from .services.delete import (
    DeleteCIRequest,
    DeletePRRequest,
    default_services,
    delete_matching_environments,
)
from .services.errors import ServiceFailure

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Delete stale multidev build environments safely.",
)


def _validate_log_level(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if value.strip().lower() not in envsweep_log.LEVEL_NAMES:
        raise typer.BadParameter(f"expected one of: {', '.join(envsweep_log.LEVEL_NAMES)}")
    return value.strip().lower()


def _version_callback(value: bool) -> None:
    if value:
        say(f"envsweep {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        callback=_validate_log_level,
        help="Log level (trace, debug, info, success, warning, error).",
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colorized output."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version."
    ),
) -> None:
    """envsweep: retention-based cleanup for build environments."""
    if log_level is not None:
        envsweep_log.set_level(log_level)
    if no_color:
        envsweep_log.set_no_color(True)


def _fail(error: ServiceFailure) -> None:
    message = str(error)
    if error.recovery_hint:
        message = f"{message}\nhint: {error.recovery_hint}"
    die(message)


def _finish(report: DeletionReport) -> None:
    if not report.ok:
        die(f"failed to delete {', '.join(report.failed)}")


@app.command("delete-ci")
def delete_ci(
    site_id: str = typer.Argument(..., help="Site name."),
    keep: int = typer.Option(0, "--keep", min=0, help="Number of environments to keep."),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Only print what would be deleted; do not delete anything."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Delete without confirmation."),
    repo_dir: Path = typer.Option(
        Path("."), "--repo-dir", help="Local checkout used to verify the repository."
    ),
) -> None:
    """Delete transient CI environments (ci-*), keeping the newest KEEP."""
    try:
        ci_service, _ = default_services(config.load_config())
        report = ci_service(
            DeleteCIRequest(
                site_id=site_id,
                options=DeleteCIOptions(keep=keep, dry_run=dry_run, yes=yes),
                repo_dir=repo_dir,
            )
        )
    except ServiceFailure as exc:
        _fail(exc)
        return
    _finish(report)


@app.command("delete-pr")
def delete_pr(
    site_id: str = typer.Argument(..., help="Site name."),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Only print what would be deleted; do not delete anything."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Delete without confirmation."),
    repo_dir: Path = typer.Option(
        Path("."), "--repo-dir", help="Local checkout used to verify the repository."
    ),
) -> None:
    """Delete pull-request environments (pr-*) whose pull request is closed."""
    try:
        _, pr_service = default_services(config.load_config())
        report = pr_service(
            DeletePRRequest(
                site_id=site_id,
                options=DeletePROptions(dry_run=dry_run, yes=yes),
                repo_dir=repo_dir,
            )
        )
    except ServiceFailure as exc:
        _fail(exc)
        return
    _finish(report)


@app.command("delete", hidden=True)
def delete(
    site_id: str = typer.Argument(..., help="Site name."),
    pattern: Optional[str] = typer.Argument(None, help="Ignored."),
) -> None:
    """Removed; use delete-ci or delete-pr."""
    try:
        delete_matching_environments(site_id, pattern)
    except ServiceFailure as exc:
        _fail(exc)
