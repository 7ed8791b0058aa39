"""Retention decisions for build environments.

A :class:`RetentionController` holds a fixed, oldest-first snapshot of
candidate environment ids and partitions them into ``retain`` and
``eligible`` using exactly one rule.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Sequence

from . import log as envsweep_log
from .providers import ProviderHandle
from .services.errors import InvalidStateError, ProviderQueryError

RetentionCategory = Literal["transient-ci", "pull-request"]

_PR_NUMBER_RE = re.compile(r"^pr-(?P<number>\d+)$")


@dataclass(frozen=True)
class RetentionPattern:
    """Environment name prefix and the kind of build it denotes."""

    prefix: str
    category: RetentionCategory

    @property
    def regex(self) -> str:
        """Anchored regular expression matching environment ids.

        Example:
            >>> TRANSIENT_CI_PATTERN.regex
            '^ci-'
        """
        return f"^{self.prefix}"


TRANSIENT_CI_PATTERN = RetentionPattern(prefix="ci-", category="transient-ci")
PR_BRANCH_PATTERN = RetentionPattern(prefix="pr-", category="pull-request")


def pull_request_number(env_id: str) -> int | None:
    """Return the pull request number encoded in an environment id.

    Example:
        >>> pull_request_number("pr-42")
        42
        >>> pull_request_number("pr-feature") is None
        True
    """
    match = _PR_NUMBER_RE.match(env_id.strip())
    if not match:
        return None
    return int(match.group("number"))


class RetentionController:
    """Partition candidate environments into retained and eligible sets."""

    def __init__(
        self,
        provider: ProviderHandle | None,
        candidates: Sequence[str],
        pattern: RetentionPattern,
        project: str,
        site_id: str,
    ) -> None:
        self._provider = provider
        self._candidates = tuple(candidates)
        self.pattern = pattern
        self.project = project
        self._site_id = site_id
        self._retain: list[str] | None = None
        self._eligible: list[str] | None = None
        self.query_failures: dict[str, ProviderQueryError] = {}

    @property
    def site_id(self) -> str:
        """Site the candidates were listed from."""
        return self._site_id

    @property
    def candidates(self) -> tuple[str, ...]:
        """Candidate ids, oldest first, as listed at construction."""
        return self._candidates

    def _require_undecided(self) -> None:
        if self._retain is not None:
            raise InvalidStateError("a retention rule has already been applied")

    def _apply(self, retain: list[str], eligible: list[str]) -> None:
        self._retain = retain
        self._eligible = eligible
        envsweep_log.debug(
            f"site={self._site_id} retain={','.join(retain) or 'none'} "
            f"eligible={','.join(eligible) or 'none'}",
            component="retention",
        )

    def eligible_if_oldest(self, keep: int) -> None:
        """Keep the ``keep`` newest candidates; the older ones become eligible."""
        self._require_undecided()
        if keep < 0:
            raise ValueError("keep must be zero or greater")
        split = max(len(self._candidates) - keep, 0)
        self._apply(list(self._candidates[split:]), list(self._candidates[:split]))

    def eligible_if_closed_pr_exists(self) -> None:
        """Make candidates eligible whose pull request exists and is closed.

        Lookup failures keep the environment and are recorded in
        ``query_failures``.
        """
        self._require_undecided()
        if self._provider is None:
            raise InvalidStateError("closed pull request rule requires a provider")
        retain: list[str] = []
        eligible: list[str] = []
        for env_id in self._candidates:
            number = pull_request_number(env_id)
            if number is None:
                envsweep_log.debug(
                    f"{env_id} has no pull request reference", component="retention"
                )
                retain.append(env_id)
                continue
            try:
                closed = self._provider.is_pull_request_closed(number)
            except ProviderQueryError as exc:
                envsweep_log.warning(f"keeping {env_id}: {exc}")
                self.query_failures[env_id] = exc
                retain.append(env_id)
                continue
            (eligible if closed else retain).append(env_id)
        self._apply(retain, eligible)

    def _require_decision(self) -> None:
        if self._retain is None or self._eligible is None:
            raise InvalidStateError("no retention rule has been applied")

    def retain(self) -> list[str]:
        """Return the ids to keep, in candidate order.

        Returns:
            A new list; mutating it does not change the decision.

        Raises:
            InvalidStateError: No retention rule has been applied yet.
        """
        self._require_decision()
        return list(self._retain)

    def eligible(self) -> list[str]:
        """Return the ids to delete, oldest first.

        Example:
            >>> controller = RetentionController(
            ...     None, ["ci-1", "ci-2", "ci-3"], TRANSIENT_CI_PATTERN, "org/repo", "site"
            ... )
            >>> controller.eligible_if_oldest(1)
            >>> controller.eligible()
            ['ci-1', 'ci-2']
        """
        self._require_decision()
        return list(self._eligible)
