"""Confirm and execute retention decisions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Literal, Sequence

from . import io
from . import log as envsweep_log
from .hosting import HostingPlatform
from .retention import RetentionController
from .services.errors import DeletionError

NOTHING_KEPT = "none of the build environments"

DeletionOutcome = Literal["no-candidates", "no-op", "dry-run", "declined", "executed"]


@dataclass(frozen=True)
class DeletionReport:
    """Result of one delete run.

    Attributes:
        outcome: Terminal state of the run.
        eligible: Environments selected for deletion.
        retained: Environments kept.
        deleted: Environments deleted successfully, in order.
        failed: Failure detail keyed by environment id.
    """

    outcome: DeletionOutcome
    eligible: tuple[str, ...] = ()
    retained: tuple[str, ...] = ()
    deleted: tuple[str, ...] = ()
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """``True`` unless some environment failed to delete.

        Example:
            >>> DeletionReport(outcome="executed", failed={"ci-1": "locked"}).ok
            False
        """
        return not self.failed


def _log_debug(message: str) -> None:
    envsweep_log.debug(message, component="delete")


def format_environments(env_ids: Sequence[str], *, empty: str = NOTHING_KEPT) -> str:
    """Render environment ids for messages.

    Example:
        >>> format_environments(["ci-1", "ci-2"])
        'ci-1,ci-2'
        >>> format_environments([])
        'none of the build environments'
    """
    if not env_ids:
        return empty
    return ",".join(env_ids)


def confirm_and_delete(
    controller: RetentionController,
    *,
    hosting: HostingPlatform,
    dry_run: bool = False,
    yes: bool = False,
    confirm: Callable[[str], bool] | None = None,
) -> DeletionReport:
    """Present the plan, confirm it, and delete eligible environments.

    Each environment is deleted together with its branch. A failure for one
    environment is reported and the remaining deletions still run.
    """
    to_keep = controller.retain()
    to_delete = controller.eligible()
    keep_list = format_environments(to_keep)

    if not to_delete:
        envsweep_log.info(f"Nothing to delete. Keeping {keep_list}.")
        return DeletionReport(outcome="no-op", retained=tuple(to_keep))

    delete_list = format_environments(to_delete, empty="")
    if dry_run:
        envsweep_log.info(f"Dry run: would delete {delete_list} and keep {keep_list}")
        return DeletionReport(
            outcome="dry-run", eligible=tuple(to_delete), retained=tuple(to_keep)
        )

    ask = confirm or (lambda text: io.confirm(text, default=False))
    if not yes and not ask(f"Are you sure you want to delete {delete_list} and keep {keep_list}?"):
        envsweep_log.info("Cancelled; nothing was deleted.")
        return DeletionReport(
            outcome="declined", eligible=tuple(to_delete), retained=tuple(to_keep)
        )

    site_id = controller.site_id
    deleted: list[str] = []
    failed: dict[str, str] = {}
    for env_id in to_delete:
        site_env_id = f"{site_id}.{env_id}"
        _log_debug(f"deleting {site_env_id}")
        try:
            hosting.delete_environment(site_env_id, delete_branch=True)
        except DeletionError as exc:
            envsweep_log.error(f"Failed to delete {env_id}: {exc.detail}")
            failed[env_id] = exc.detail
            continue
        envsweep_log.success(f"Deleted {env_id}")
        deleted.append(env_id)

    envsweep_log.info(
        f"Deleted {format_environments(deleted, empty='nothing')}; "
        f"failed {format_environments(list(failed), empty='nothing')}."
    )
    return DeletionReport(
        outcome="executed",
        eligible=tuple(to_delete),
        retained=tuple(to_keep),
        deleted=tuple(deleted),
        failed=failed,
    )
