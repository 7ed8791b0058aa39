"""Service base class shared by the delete workflows.

A service turns one request model into one result. ``_run`` raises
``ServiceFailure`` for expected problems (no candidates, bad credentials,
repository mismatch); ``__call__`` routes those through ``_handle_failure``
so a service can downgrade a failure to a result. Anything not handled there
propagates to the CLI, which reports it and exits non-zero.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .. import log as envsweep_log
from .errors import ServiceFailure

R = TypeVar("R")
T = TypeVar("T")


class BaseService(ABC, Generic[R, T]):
    """Callable request -> result service."""

    def __call__(self, request: R) -> T:
        name = type(self).__name__
        envsweep_log.trace(f"{name} start", component="service")
        try:
            return self._run(request)
        except ServiceFailure as failure:
            envsweep_log.debug(f"{name} failed: {failure.code}", component="service")
            return self._handle_failure(request, failure)

    @abstractmethod
    def _run(self, request: R) -> T: ...

    def _handle_failure(self, request: R, error: ServiceFailure) -> T:
        """Re-raise by default; override to turn ``error`` into a result."""
        raise error
