"""Data models."""

from .snippet import (
    FavoriteRequest,
    Fragment,
    FragmentIn,
    PinRequest,
    Snippet,
    SnippetIn,
    SnippetRef,
)
from .query import FilterSpec, PageResult, Pagination, Scope, SortKey
from .metadata import MetadataCounts, SnippetMetadata

__all__ = [
    "FavoriteRequest",
    "Fragment",
    "FragmentIn",
    "PinRequest",
    "Snippet",
    "SnippetIn",
    "SnippetRef",
    "FilterSpec",
    "PageResult",
    "Pagination",
    "Scope",
    "SortKey",
    "MetadataCounts",
    "SnippetMetadata",
]
