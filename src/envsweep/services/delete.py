"""Delete services for transient CI and pull-request environments.

Each service builds a :class:`RetentionController` from a fresh snapshot of
the site's environments, applies its retention rule, and hands the decision
to the deletion orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

from pydantic import BaseModel

from .. import git
from .. import log as envsweep_log
from ..config import SweepConfig
from ..deletion import DeletionReport, confirm_and_delete
from ..hosting import HostingPlatform, TerminusClient
from ..models import DeleteCIOptions, DeleteOptions, DeletePROptions
from ..providers import ProviderHandle, resolve_provider
from ..retention import (
    PR_BRANCH_PATTERN,
    TRANSIENT_CI_PATTERN,
    RetentionController,
    RetentionPattern,
)
from .base import BaseService
from .errors import (
    CommandRemovedError,
    MetadataError,
    NoCandidatesError,
    RepositoryMismatchError,
    ServiceFailure,
)

SAFE_COMMANDS = ("envsweep delete-ci", "envsweep delete-pr")


class ResolveProvider(Protocol):
    """Typed dependency for provider inference."""

    def __call__(self, remote_url: str) -> ProviderHandle: ...


class LocalRemoteUrl(Protocol):
    """Typed dependency returning the local ``origin`` URL, if any."""

    def __call__(self, repo_dir: Path) -> str | None: ...


class DeleteCIRequest(BaseModel):
    """Input contract for deleting transient CI environments.

    Attributes:
        site_id: Hosting-platform site name.
        options: Keep count and confirmation flags.
        repo_dir: Local checkout compared against the build metadata.
    """

    site_id: str
    options: DeleteCIOptions = DeleteCIOptions()
    repo_dir: Path = Path(".")


class DeletePRRequest(BaseModel):
    """Input contract for deleting closed pull-request environments."""

    site_id: str
    options: DeletePROptions = DeletePROptions()
    repo_dir: Path = Path(".")


def _log_debug(message: str) -> None:
    envsweep_log.debug(message, component="delete")


def create_retention_controller(
    site_id: str,
    pattern: RetentionPattern,
    *,
    hosting: HostingPlatform,
    provider_resolver: ResolveProvider,
    local_remote_url: str | None,
) -> RetentionController:
    """Assemble a controller for ``site_id`` from a fresh environment snapshot.

    Raises:
        NoCandidatesError: No environment matched ``pattern``.
        MetadataError: Build metadata records no repository URL.
        AuthError: Provider credentials are invalid.
        RepositoryMismatchError: The local checkout builds a different project.
    """
    environments = hosting.list_environments(site_id, pattern.regex)
    if not environments:
        raise NoCandidatesError(pattern.prefix, site_id)
    candidates = [env.id for env in environments]
    _log_debug(f"candidates site={site_id} oldest-first={','.join(candidates)}")

    remote_url = hosting.read_remote_url(site_id, candidates)
    if not remote_url:
        raise MetadataError(site_id, tuple(candidates))

    provider = provider_resolver(remote_url)
    provider.validate_credentials()

    project = git.project_from_remote_url(remote_url)
    if local_remote_url:
        local_project = git.project_from_remote_url(local_remote_url)
        if local_project != project:
            raise RepositoryMismatchError(local_project, project, site_id)

    return RetentionController(provider, candidates, pattern, project, site_id)


@dataclass
class _DeleteEnvironmentsService:
    hosting: HostingPlatform
    provider_resolver: ResolveProvider
    local_remote_url: LocalRemoteUrl
    confirm: Callable[[str], bool] | None = None

    def _controller(
        self, site_id: str, pattern: RetentionPattern, repo_dir: Path
    ) -> RetentionController:
        return create_retention_controller(
            site_id,
            pattern,
            hosting=self.hosting,
            provider_resolver=self.provider_resolver,
            local_remote_url=self.local_remote_url(repo_dir),
        )

    def _execute(self, controller: RetentionController, options: DeleteOptions) -> DeletionReport:
        return confirm_and_delete(
            controller,
            hosting=self.hosting,
            dry_run=options.dry_run,
            yes=options.yes,
            confirm=self.confirm,
        )

    def _handle_failure(self, request: object, error: ServiceFailure) -> DeletionReport:
        if isinstance(error, NoCandidatesError):
            envsweep_log.info(str(error))
            return DeletionReport(outcome="no-candidates")
        raise error


class DeleteCIEnvironmentsService(
    _DeleteEnvironmentsService, BaseService[DeleteCIRequest, DeletionReport]
):
    """Delete all but the newest ``keep`` transient CI environments."""

    def _run(self, request: DeleteCIRequest) -> DeletionReport:
        controller = self._controller(request.site_id, TRANSIENT_CI_PATTERN, request.repo_dir)
        controller.eligible_if_oldest(request.options.keep)
        return self._execute(controller, request.options)


class DeletePREnvironmentsService(
    _DeleteEnvironmentsService, BaseService[DeletePRRequest, DeletionReport]
):
    """Delete pull-request environments whose pull request is closed."""

    def _run(self, request: DeletePRRequest) -> DeletionReport:
        controller = self._controller(request.site_id, PR_BRANCH_PATTERN, request.repo_dir)
        controller.eligible_if_closed_pr_exists()
        return self._execute(controller, request.options)


def delete_matching_environments(site_id: str, pattern: str | None = None) -> None:
    """Removed: arbitrary-pattern deletion was too easy to misconfigure."""
    raise CommandRemovedError("envsweep delete", SAFE_COMMANDS)


def default_services(
    config: SweepConfig,
) -> tuple[DeleteCIEnvironmentsService, DeletePREnvironmentsService]:
    """Build both services wired to the CLI-backed adapters."""
    hosting = TerminusClient(config=config)

    def provider_resolver(remote_url: str) -> ProviderHandle:
        return resolve_provider(remote_url, config)

    def local_remote_url(repo_dir: Path) -> str | None:
        return git.git_origin_url(repo_dir, git_path=config.git_path)

    kwargs = {
        "hosting": hosting,
        "provider_resolver": provider_resolver,
        "local_remote_url": local_remote_url,
    }
    return DeleteCIEnvironmentsService(**kwargs), DeletePREnvironmentsService(**kwargs)
