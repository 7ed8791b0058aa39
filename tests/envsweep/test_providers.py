from unittest.mock import patch

import pytest

from envsweep.config import SweepConfig
from envsweep.providers import GithubProvider, GitlabProvider, resolve_provider
from envsweep.services.errors import AuthError, ProviderQueryError, UnsupportedProviderError
from tests.envsweep.helpers import FakeRunner, failed, ok


def _github(runner: FakeRunner, **config: object) -> GithubProvider:
    return GithubProvider(
        host="github.com", project="org/repo", config=SweepConfig(**config), runner=runner
    )


def test_resolve_provider_by_host() -> None:
    github = resolve_provider("https://token@github.com/Org/Repo.git", SweepConfig())
    gitlab = resolve_provider("git@gitlab.example.com:group/repo.git", SweepConfig())

    assert isinstance(github, GithubProvider)
    assert github.project == "org/repo"
    assert isinstance(gitlab, GitlabProvider)
    assert gitlab.host == "gitlab.example.com"


@pytest.mark.parametrize(
    "remote_url", ["git@bitbucket.org:org/repo.git", "org/repo", "https://github.com/"]
)
def test_resolve_provider_rejects_unknown_remotes(remote_url: str) -> None:
    with pytest.raises(UnsupportedProviderError):
        resolve_provider(remote_url, SweepConfig())


@pytest.mark.parametrize(
    ("state", "expected"), [("OPEN", False), ("CLOSED", True), ("MERGED", True)]
)
def test_github_pull_request_state(state: str, expected: bool) -> None:
    runner = FakeRunner({("gh", "pr", "view"): ok(f'{{"state": "{state}"}}')})

    assert _github(runner).is_pull_request_closed(42) is expected
    assert runner.requests[0].argv == (
        "gh",
        "pr",
        "view",
        "42",
        "--repo",
        "github.com/org/repo",
        "--json",
        "state",
    )


def test_github_missing_pull_request_is_not_closed() -> None:
    runner = FakeRunner(
        {
            ("gh", "pr", "view"): failed(
                "GraphQL: Could not resolve to a PullRequest with the number of 9."
            )
        }
    )

    assert _github(runner).is_pull_request_closed(9) is False


def test_github_retries_transient_errors() -> None:
    runner = FakeRunner(
        {("gh", "pr", "view"): [failed("HTTP 502: Bad Gateway"), ok('{"state": "CLOSED"}')]}
    )

    with patch("envsweep.providers.time.sleep") as sleep:
        assert _github(runner, provider_retry_attempts=2).is_pull_request_closed(3) is True

    assert len(runner.requests) == 2
    sleep.assert_called_once()


def test_github_query_failure_raises_after_retries() -> None:
    runner = FakeRunner({("gh", "pr", "view"): [failed("HTTP 503"), failed("HTTP 503")]})

    with patch("envsweep.providers.time.sleep"):
        with pytest.raises(ProviderQueryError) as exc_info:
            _github(runner, provider_retry_attempts=2).is_pull_request_closed(4)

    assert exc_info.value.ref == "#4"
    assert len(runner.requests) == 2


def test_github_non_retryable_failure_raises_immediately() -> None:
    runner = FakeRunner({("gh", "pr", "view"): failed("permission denied")})

    with pytest.raises(ProviderQueryError):
        _github(runner, provider_retry_attempts=3).is_pull_request_closed(4)

    assert len(runner.requests) == 1


def test_github_unparseable_output() -> None:
    runner = FakeRunner({("gh", "pr", "view"): ok("not json")})

    with pytest.raises(ProviderQueryError, match="unparseable"):
        _github(runner).is_pull_request_closed(4)


def test_github_validate_credentials() -> None:
    runner = FakeRunner({("gh", "auth", "status"): ok()})

    _github(runner).validate_credentials()

    assert runner.requests[0].argv == ("gh", "auth", "status", "--hostname", "github.com")


def test_github_invalid_credentials_raise_auth_error() -> None:
    runner = FakeRunner(
        {("gh", "auth", "status"): failed("You are not logged into any GitHub hosts.")}
    )

    with pytest.raises(AuthError) as exc_info:
        _github(runner).validate_credentials()

    assert exc_info.value.code == "auth_failed"
    assert exc_info.value.host == "github.com"


@pytest.mark.parametrize(
    ("state", "expected"),
    [("opened", False), ("closed", True), ("merged", True), ("locked", False)],
)
def test_gitlab_merge_request_state(state: str, expected: bool) -> None:
    runner = FakeRunner({("glab", "api"): ok(f'{{"iid": 7, "state": "{state}"}}')})
    provider = GitlabProvider(
        host="gitlab.com", project="group/sub/repo", config=SweepConfig(), runner=runner
    )

    assert provider.is_pull_request_closed(7) is expected
    assert runner.requests[0].argv[-1] == "projects/group%2Fsub%2Frepo/merge_requests/7"


def test_gitlab_missing_merge_request_is_not_closed() -> None:
    runner = FakeRunner({("glab", "api"): failed("glab: 404 Not Found (HTTP 404)")})
    provider = GitlabProvider(
        host="gitlab.com", project="group/repo", config=SweepConfig(), runner=runner
    )

    assert provider.is_pull_request_closed(1) is False
