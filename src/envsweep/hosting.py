"""Hosting-platform adapter backed by the ``terminus`` CLI.

Lists environments, reads the build metadata each build step leaves in the
environment's code, and deletes multidev environments.
"""

from __future__ import annotations

import json
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from pydantic import ValidationError

from . import exec as exec_util
from . import log as envsweep_log
from . import paths
from .config import SweepConfig
from .models import BuildMetadata, Environment
from .services.errors import DeletionError, ServiceFailure


class HostingPlatform(Protocol):
    """Hosting-platform operations consumed by the delete workflow."""

    def list_environments(self, site_id: str, pattern: str) -> list[Environment]:
        """Return environments whose id matches ``pattern``, oldest first."""
        ...

    def read_remote_url(self, site_id: str, env_ids: Sequence[str]) -> str | None:
        """Return the repository URL recorded in build metadata."""
        ...

    def delete_environment(self, site_env_id: str, *, delete_branch: bool) -> None:
        """Delete ``site.env``; raise ``DeletionError`` on failure."""
        ...


def _log_debug(message: str) -> None:
    envsweep_log.debug(message, component="hosting")


def oldest_first(environments: Sequence[Environment], pattern: str) -> list[Environment]:
    """Filter environments by ``pattern`` and order them oldest first.

    Ties on creation time keep id order so results are deterministic.
    """
    matcher = re.compile(pattern)
    matched = [env for env in environments if matcher.search(env.id)]
    return sorted(matched, key=lambda env: (env.created_at, env.id))


@dataclass(frozen=True)
class TerminusClient:
    """``terminus`` CLI adapter implementing :class:`HostingPlatform`."""

    config: SweepConfig
    runner: exec_util.CommandRunner | None = None

    def _run(self, args: list[str]) -> tuple[exec_util.CommandRequest, exec_util.CommandResult]:
        request = exec_util.CommandRequest(
            argv=(self.config.terminus_path, *args),
            timeout_seconds=self.config.command_timeout_seconds,
        )
        result = exec_util.run_with_runner(request, runner=self.runner, component="hosting")
        if result is None:
            raise ServiceFailure(
                "dependency_missing",
                exec_util.missing_command_detail(request),
                recovery_hint="install terminus or set ENVSWEEP_TERMINUS_PATH",
            )
        return request, result

    def list_environments(self, site_id: str, pattern: str) -> list[Environment]:
        request, result = self._run(["env:list", site_id, "--format=json"])
        if not result.ok:
            raise ServiceFailure(
                "external_command_failed",
                exec_util.command_failure_detail(request, result),
            )
        try:
            payload = exec_util.parse_json_output(result)
        except json.JSONDecodeError as exc:
            raise ServiceFailure(
                "unexpected_state", f"failed to parse environment list for {site_id}: {exc}"
            ) from exc
        if payload is None:
            return []
        if isinstance(payload, dict):
            entries = list(payload.values())
        elif isinstance(payload, list):
            entries = payload
        else:
            raise ServiceFailure(
                "unexpected_state", f"unexpected environment list output for {site_id}"
            )
        try:
            environments = [Environment.model_validate(entry) for entry in entries]
        except ValidationError as exc:
            raise ServiceFailure(
                "unexpected_state", f"invalid environment entry for {site_id}: {exc}"
            ) from exc
        return oldest_first(environments, pattern)

    def read_build_metadata(self, site_env_id: str) -> BuildMetadata | None:
        with tempfile.TemporaryDirectory(prefix="envsweep-") as tmp:
            dest = Path(tmp)
            request, result = self._run(
                [
                    "rsync",
                    f"{site_env_id}:code/{paths.BUILD_METADATA_FILENAME}",
                    str(dest),
                ]
            )
            metadata_file = dest / paths.BUILD_METADATA_FILENAME
            if not result.ok or not metadata_file.exists():
                _log_debug(
                    f"no build metadata for {site_env_id}: "
                    f"{exec_util.command_failure_detail(request, result)}"
                )
                return None
            try:
                payload = json.loads(metadata_file.read_text(encoding="utf-8"))
                return BuildMetadata.model_validate(payload)
            except (json.JSONDecodeError, ValidationError) as exc:
                envsweep_log.warning(f"ignoring unreadable build metadata for {site_env_id}: {exc}")
                return None

    def read_remote_url(self, site_id: str, env_ids: Sequence[str]) -> str | None:
        for env_id in env_ids:
            metadata = self.read_build_metadata(f"{site_id}.{env_id}")
            if metadata is not None and metadata.url:
                _log_debug(f"remote url from {site_id}.{env_id}: {metadata.url}")
                return metadata.url
        return None

    def delete_environment(self, site_env_id: str, *, delete_branch: bool) -> None:
        args = ["multidev:delete", site_env_id, "--yes"]
        if delete_branch:
            args.insert(2, "--delete-branch")
        env_id = site_env_id.split(".", 1)[-1]
        try:
            request, result = self._run(args)
        except ServiceFailure as exc:
            raise DeletionError(env_id, str(exc)) from exc
        if not result.ok:
            raise DeletionError(env_id, exec_util.command_failure_detail(request, result))
