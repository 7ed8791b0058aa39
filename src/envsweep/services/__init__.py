from .base import BaseService
from .errors import (
    AuthError,
    CommandRemovedError,
    DeletionError,
    InvalidStateError,
    MetadataError,
    NoCandidatesError,
    ProviderQueryError,
    RepositoryMismatchError,
    ServiceFailure,
    UnsupportedProviderError,
    ValidationFailedError,
)

__all__ = [
    "AuthError",
    "BaseService",
    "CommandRemovedError",
    "DeletionError",
    "InvalidStateError",
    "MetadataError",
    "NoCandidatesError",
    "ProviderQueryError",
    "RepositoryMismatchError",
    "ServiceFailure",
    "UnsupportedProviderError",
    "ValidationFailedError",
]
