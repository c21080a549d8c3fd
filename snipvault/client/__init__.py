"""Client-side list cache and optimistic mutation coordinator."""

from .api_client import SnippetApiClient
from .coordinator import (
    MutationCoordinator,
    MutationFailure,
    MutationKind,
    MutationOutcome,
    MutationSuccess,
)
from .list_cache import CacheEntry, ListCache

__all__ = [
    "SnippetApiClient",
    "MutationCoordinator",
    "MutationFailure",
    "MutationKind",
    "MutationOutcome",
    "MutationSuccess",
    "CacheEntry",
    "ListCache",
]
