"""Git-hosting provider adapters for pull request state.

Providers are inferred from the remote URL recorded in build metadata and
query pull request state through the provider's CLI (``gh`` or ``glab``).
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

from . import exec as exec_util
from . import git
from .config import SweepConfig
from .services.errors import AuthError, ProviderQueryError, UnsupportedProviderError

_RETRY_ERROR_MARKERS = (
    "timed out",
    "timeout",
    "temporarily unavailable",
    "connection reset",
    "connection refused",
    "network",
    "tls",
    "rate limit",
    "502",
    "503",
    "504",
)
_NOT_FOUND_MARKERS = (
    "could not resolve to a pullrequest",
    "no pull requests found",
    "404",
    "not found",
)


class ProviderHandle(Protocol):
    """Validated provider client consumed by the retention controller."""

    @property
    def slug(self) -> str: ...

    @property
    def project(self) -> str: ...

    def validate_credentials(self) -> None:
        """Raise ``AuthError`` when credentials are missing or invalid."""
        ...

    def is_pull_request_closed(self, number: int) -> bool:
        """Return ``True`` iff pull request ``number`` exists and is closed.

        Raises ``ProviderQueryError`` when the state cannot be determined.
        """
        ...


def _is_retryable_message(message: str) -> bool:
    normalized = message.strip().lower()
    if not normalized:
        return False
    return any(marker in normalized for marker in _RETRY_ERROR_MARKERS)


def _is_not_found_message(message: str) -> bool:
    normalized = message.strip().lower()
    return any(marker in normalized for marker in _NOT_FOUND_MARKERS)


@dataclass(frozen=True)
class _CliProvider:
    host: str
    project: str
    config: SweepConfig
    runner: exec_util.CommandRunner | None = None

    slug = "cli"
    display_name = "provider"

    def _executable(self) -> str:
        raise NotImplementedError

    def _run_once(
        self, args: list[str]
    ) -> tuple[exec_util.CommandRequest, exec_util.CommandResult | None]:
        request = exec_util.CommandRequest(
            argv=(self._executable(), *args),
            timeout_seconds=self.config.command_timeout_seconds,
        )
        return request, exec_util.run_with_runner(
            request, runner=self.runner, component=self.slug
        )

    def _query(self, args: list[str], *, ref: str) -> object | None:
        """Run a JSON query with retries; ``None`` means the object was not found."""
        attempts = max(int(self.config.provider_retry_attempts), 1)
        detail = ""
        for attempt in range(1, attempts + 1):
            request, result = self._run_once(args)
            if result is None:
                raise ProviderQueryError(ref, exec_util.missing_command_detail(request))
            if result.ok:
                try:
                    return exec_util.parse_json_output(result)
                except json.JSONDecodeError as exc:
                    raise ProviderQueryError(ref, f"unparseable response: {exc}") from exc
            message = (result.stderr or result.stdout or "").strip()
            if _is_not_found_message(message):
                return None
            detail = exec_util.command_failure_detail(request, result)
            if attempt < attempts and (result.timed_out or _is_retryable_message(message)):
                time.sleep(self.config.provider_retry_backoff_seconds * attempt)
                continue
            break
        raise ProviderQueryError(ref, detail)

    def validate_credentials(self) -> None:
        request, result = self._run_once(["auth", "status", "--hostname", self.host])
        if result is None:
            raise AuthError(self.display_name, self.host, exec_util.missing_command_detail(request))
        if not result.ok:
            detail = (result.stderr or result.stdout or "").strip().splitlines()
            raise AuthError(self.display_name, self.host, detail[0] if detail else "")


@dataclass(frozen=True)
class GithubProvider(_CliProvider):
    """GitHub pull requests through ``gh``."""

    slug = "github"
    display_name = "GitHub"

    def _executable(self) -> str:
        return self.config.gh_path

    def is_pull_request_closed(self, number: int) -> bool:
        payload = self._query(
            [
                "pr",
                "view",
                str(number),
                "--repo",
                f"{self.host}/{self.project}",
                "--json",
                "state",
            ],
            ref=f"#{number}",
        )
        if payload is None:
            return False
        if not isinstance(payload, dict):
            raise ProviderQueryError(f"#{number}", "unexpected gh output for pr view")
        state = str(payload.get("state") or "").strip().upper()
        if not state:
            raise ProviderQueryError(f"#{number}", "pull request state missing")
        return state in {"CLOSED", "MERGED"}


@dataclass(frozen=True)
class GitlabProvider(_CliProvider):
    """GitLab merge requests through ``glab api``."""

    slug = "gitlab"
    display_name = "GitLab"

    def _executable(self) -> str:
        return self.config.glab_path

    def is_pull_request_closed(self, number: int) -> bool:
        project_id = quote(self.project, safe="")
        payload = self._query(
            [
                "api",
                "--hostname",
                self.host,
                f"projects/{project_id}/merge_requests/{number}",
            ],
            ref=f"!{number}",
        )
        if payload is None:
            return False
        if not isinstance(payload, dict):
            raise ProviderQueryError(f"!{number}", "unexpected glab output for merge request")
        state = str(payload.get("state") or "").strip().lower()
        if not state:
            raise ProviderQueryError(f"!{number}", "merge request state missing")
        return state in {"closed", "merged"}


def resolve_provider(
    remote_url: str,
    config: SweepConfig,
    *,
    runner: exec_util.CommandRunner | None = None,
) -> ProviderHandle:
    """Infer the provider that hosts ``remote_url``.

    Example:
        >>> resolve_provider("git@github.com:Org/Repo.git", SweepConfig()).project
        'org/repo'
    """
    host = git.remote_host(remote_url)
    project = git.project_from_remote_url(remote_url)
    if not host or "/" not in project:
        raise UnsupportedProviderError(remote_url)
    if "github" in host:
        return GithubProvider(host=host, project=project, config=config, runner=runner)
    if "gitlab" in host:
        return GitlabProvider(host=host, project=project, config=config, runner=runner)
    raise UnsupportedProviderError(remote_url)
