"""Service failure contracts.

Services return typed outcomes on success and raise ServiceFailure on expected
domain/policy/runtime failures. Programmer bugs raise normal exceptions.
"""

from __future__ import annotations

from typing import Literal

ServiceFailureCode = Literal[
    "validation_failed",
    "dependency_missing",
    "policy_blocked",
    "auth_failed",
    "no_candidates",
    "external_command_failed",
    "unexpected_state",
]


class ServiceFailure(Exception):
    """Expected service failure: validation, policy, or runtime error.

    Raised by services instead of returning a failure value. Use ``raise
    ServiceFailure(...) from exc`` to chain a causing exception; it is
    available as ``__cause__``. Callers catch ServiceFailure and handle per
    their interface (the CLI prints the message and exits non-zero).
    """

    def __init__(
        self,
        code: ServiceFailureCode,
        message: str,
        *,
        recovery_hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.recovery_hint = recovery_hint


class ValidationFailedError(ServiceFailure):
    """Validation failed (invalid input, constraint violation)."""

    def __init__(self, message: str, *, recovery_hint: str | None = None) -> None:
        super().__init__("validation_failed", message, recovery_hint=recovery_hint)


class NoCandidatesError(ServiceFailure):
    """No environments matched the delete pattern. Informational."""

    def __init__(self, pattern: str, site_id: str) -> None:
        super().__init__(
            "no_candidates",
            f'No environments matched the provided pattern "{pattern}".',
        )
        self.pattern = pattern
        self.site_id = site_id


class RepositoryMismatchError(ServiceFailure):
    """Local git remote and build metadata name different projects."""

    def __init__(self, local_project: str, metadata_project: str, site_id: str) -> None:
        super().__init__(
            "policy_blocked",
            f"Remote repository mismatch: local repository, {local_project} is different "
            f"than the repository {metadata_project} associated with the site {site_id}.",
            recovery_hint="run from a checkout of the repository that builds this site",
        )
        self.local_project = local_project
        self.metadata_project = metadata_project
        self.site_id = site_id


class AuthError(ServiceFailure):
    """Git provider credentials are missing or invalid."""

    def __init__(self, provider: str, host: str, detail: str = "") -> None:
        message = f"{provider} credentials for {host} are missing or invalid"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(
            "auth_failed",
            message,
            recovery_hint=f"authenticate the {provider} CLI for {host} and retry",
        )
        self.provider = provider
        self.host = host


class UnsupportedProviderError(ServiceFailure):
    """No git provider is known for the remote URL."""

    def __init__(self, remote_url: str) -> None:
        super().__init__(
            "dependency_missing",
            f"cannot infer a git provider from {remote_url}",
            recovery_hint="only GitHub and GitLab remotes are supported",
        )
        self.remote_url = remote_url


class MetadataError(ServiceFailure):
    """Build metadata does not record a source repository URL."""

    def __init__(self, site_id: str, env_ids: tuple[str, ...]) -> None:
        super().__init__(
            "unexpected_state",
            f"no repository URL recorded in build metadata for {site_id} "
            f"environments {', '.join(env_ids)}",
        )
        self.site_id = site_id
        self.env_ids = env_ids


class ProviderQueryError(ServiceFailure):
    """A pull request status lookup failed.

    ``ref`` is the pull request reference (``#42``) or environment id.
    """

    def __init__(self, ref: str, detail: str) -> None:
        super().__init__(
            "external_command_failed",
            f"failed to query pull request status for {ref}: {detail}",
        )
        self.ref = ref
        self.detail = detail


class DeletionError(ServiceFailure):
    """Deleting one environment failed."""

    def __init__(self, env_id: str, detail: str) -> None:
        super().__init__("external_command_failed", f"failed to delete {env_id}: {detail}")
        self.env_id = env_id
        self.detail = detail


class CommandRemovedError(ServiceFailure):
    """A removed entry point was invoked."""

    def __init__(self, command: str, replacements: tuple[str, ...]) -> None:
        super().__init__(
            "policy_blocked",
            f"The command {command} has been removed. "
            f"Please use {' or '.join(replacements)} instead.",
        )
        self.command = command
        self.replacements = replacements


class InvalidStateError(RuntimeError):
    """A retention partition was read before a rule was applied."""
